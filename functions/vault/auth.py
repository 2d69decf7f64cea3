"""
Session and auth state for the vault.

A single SessionManager per process owns the "current user" pointer.
Subscribers get the current value as soon as they subscribe and then
every transition, synchronously, in subscription order.

Passwords are accepted but never stored or checked.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, fields
from typing import Callable, Generic, List, Optional, TypeVar, Union

from shared.types import User
from vault.errors import (
    DEFAULT_MESSAGES,
    EmailNotFound,
    ErrorKind,
    NotAuthenticated,
    ValidationFailure,
)
from vault.stores import SESSION_KEY, VaultStores

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[User]], None]

V = TypeVar("V")

# Fields a profile update may touch; profile_id is handled separately.
_PROFILE_FIELDS = {f.name for f in fields(User)} - {"uid", "email", "profile_id"}
# Stored camelCase names accepted alongside the field names
_PROFILE_ALIASES = {
    "displayName": "display_name",
    "profileId": "profile_id",
    "profilePictureURL": "profile_picture_url",
    "profilePictureUrl": "profile_picture_url",
}


@dataclass(frozen=True)
class Ok(Generic[V]):
    value: V


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ""

    def __post_init__(self):
        if not self.message:
            object.__setattr__(self, "message", DEFAULT_MESSAGES[self.kind])


AuthResult = Union[Ok[User], Err]


class SessionManager:
    def __init__(self, stores: VaultStores, owner_email: str | None = None):
        self.stores = stores
        self.owner_email = owner_email
        self._listeners: List[AuthListener] = []

    def _session_uid(self) -> Optional[str]:
        session = self.stores.kv.load(SESSION_KEY)
        if isinstance(session, dict):
            return session.get("uid")
        return None

    def current_user(self) -> Optional[User]:
        uid = self._session_uid()
        return self.stores.users.get(uid) if uid else None

    def is_owner(self, user: Optional[User]) -> bool:
        return bool(user and self.owner_email and user.email == self.owner_email)

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Deliver the current user now, then on every auth change."""
        self._listeners.append(listener)
        self._deliver(listener, self.current_user())

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _deliver(self, listener: AuthListener, user: Optional[User]) -> None:
        try:
            listener(user)
        except Exception:
            logger.exception("Auth listener failed")

    def _broadcast(self, user: Optional[User]) -> None:
        for listener in list(self._listeners):
            self._deliver(listener, user)

    def _start_session(self, user: User) -> None:
        self.stores.kv.save(SESSION_KEY, {"uid": user.uid})
        self._broadcast(user)

    def sign_up(self, email: str, password: str) -> AuthResult:
        if not email:
            return Err(ErrorKind.VALIDATION_FAILURE, "Email is required.")
        if self.stores.find_user_by_email(email):
            return Err(ErrorKind.DUPLICATE_EMAIL)
        uid = f"user-{uuid.uuid4().hex}"
        user = User(
            uid=uid,
            email=email,
            display_name=email.split("@")[0],
            profile_picture_url=f"https://picsum.photos/seed/{uid}/200",
        )
        self.stores.users.upsert(user)
        logger.info("Signed up %s", uid)
        self._start_session(user)
        return Ok(user)

    def sign_in(self, email: str, password: str) -> AuthResult:
        user = self.stores.find_user_by_email(email)
        if not user:
            return Err(ErrorKind.USER_NOT_FOUND)
        logger.info("Signed in %s", user.uid)
        self._start_session(user)
        return Ok(user)

    def sign_out(self) -> None:
        self.stores.kv.delete(SESSION_KEY)
        self._broadcast(None)

    def update_profile(self, updates: dict) -> User:
        user = self.current_user()
        if not user:
            raise NotAuthenticated()
        changes = {}
        for key, value in updates.items():
            name = _PROFILE_ALIASES.get(key, key)
            if name != "profile_id":
                changes[name] = value
        unknown = set(changes) - _PROFILE_FIELDS
        if unknown:
            raise ValidationFailure(
                f"Unknown profile fields: {', '.join(sorted(unknown))}"
            )
        for name, value in changes.items():
            setattr(user, name, value)
        self.stores.users.upsert(user)
        self._broadcast(user)
        return user

    def update_password(self, new_password: str) -> None:
        user = self.current_user()
        if not user:
            raise NotAuthenticated()
        if not new_password:
            raise ValidationFailure("Password is required.")
        logger.info("Password updated for %s (not persisted)", user.uid)

    def forgot_password(self, email: str) -> None:
        if not self.stores.find_user_by_email(email):
            raise EmailNotFound()
        logger.info("Password reset requested for %s", email)

    def get_user_by_id(self, uid: str) -> Optional[User]:
        return self.stores.users.get(uid)

    def get_owner_profile(self) -> Optional[User]:
        if not self.owner_email:
            return None
        return self.stores.find_user_by_email(self.owner_email)
