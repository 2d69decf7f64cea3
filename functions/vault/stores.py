"""
Entity stores layered over a KeyValueStore.

Every store owns one key and rewrites the whole document on each
mutation. Records are converted to and from their camelCase JSON form
at this boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from shared.types import Comment, Notification, SiteSettings, User, Work
from vault.errors import StorageFailure
from vault.kv import KeyValueStore

logger = logging.getLogger(__name__)

USERS_KEY = "vault_users"
WORKS_KEY = "vault_works"
COMMENTS_KEY = "vault_comments"
SITE_SETTINGS_KEY = "vault_site_settings"
NOTIFICATIONS_KEY = "vault_notifications"
SESSION_KEY = "vault_session"

T = TypeVar("T", User, Work)
R = TypeVar("R")


def _read_record(key: str, from_dict: Callable[[Any], R], raw: Any) -> R:
    try:
        return from_dict(raw)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.error("Malformed record in %s: %s", key, exc)
        raise StorageFailure(
            f"Stored document {key} holds a malformed record: {exc}"
        ) from exc


class MapStore(Generic[T]):
    """A document mapping record id -> record, kept in insertion order."""

    def __init__(
        self,
        kv: KeyValueStore,
        key: str,
        from_dict: Callable[[dict], T],
        id_of: Callable[[T], str],
    ):
        self.kv = kv
        self.key = key
        self._from_dict = from_dict
        self._id_of = id_of

    def _load(self) -> Dict[str, dict]:
        data = self.kv.load(self.key)
        return data if isinstance(data, dict) else {}

    def get(self, record_id: str) -> Optional[T]:
        raw = self._load().get(record_id)
        return _read_record(self.key, self._from_dict, raw) if raw else None

    def list(self) -> List[T]:
        return [
            _read_record(self.key, self._from_dict, raw)
            for raw in self._load().values()
        ]

    def upsert(self, record: T) -> T:
        data = self._load()
        data[self._id_of(record)] = record.as_dict()
        self.kv.save(self.key, data)
        return record

    def remove(self, record_id: str) -> None:
        data = self._load()
        if record_id in data:
            del data[record_id]
            self.kv.save(self.key, data)


class CommentStore:
    """Comments grouped per work: {work_id: [comment, ...]}."""

    def __init__(self, kv: KeyValueStore, key: str = COMMENTS_KEY):
        self.kv = kv
        self.key = key

    def _load(self) -> Dict[str, list]:
        data = self.kv.load(self.key)
        return data if isinstance(data, dict) else {}

    def list_for(self, work_id: str) -> List[Comment]:
        return [
            _read_record(self.key, Comment.from_dict, raw)
            for raw in self._load().get(work_id) or []
        ]

    def get(self, work_id: str, comment_id: str) -> Optional[Comment]:
        for comment in self.list_for(work_id):
            if comment.id == comment_id:
                return comment
        return None

    def append(self, comment: Comment) -> Comment:
        data = self._load()
        data.setdefault(comment.work_id, []).append(comment.as_dict())
        self.kv.save(self.key, data)
        return comment

    def remove(self, work_id: str, comment_id: str) -> bool:
        data = self._load()
        comments = data.get(work_id)
        if not comments:
            return False
        kept = [raw for raw in comments if raw.get("id") != comment_id]
        if len(kept) == len(comments):
            return False
        data[work_id] = kept
        self.kv.save(self.key, data)
        return True

    def remove_all(self, work_id: str) -> int:
        data = self._load()
        removed = data.pop(work_id, None)
        if removed is None:
            return 0
        self.kv.save(self.key, data)
        return len(removed)


class NotificationStore:
    """Notifications as a single list, newest first."""

    def __init__(self, kv: KeyValueStore, key: str = NOTIFICATIONS_KEY):
        self.kv = kv
        self.key = key

    def _load(self) -> List[dict]:
        data = self.kv.load(self.key)
        return data if isinstance(data, list) else []

    def get(self, notification_id: str) -> Optional[Notification]:
        for notification in self.list():
            if notification.id == notification_id:
                return notification
        return None

    def list(self) -> List[Notification]:
        return [
            _read_record(self.key, Notification.from_dict, raw) for raw in self._load()
        ]

    def list_for(self, user_id: str) -> List[Notification]:
        return [n for n in self.list() if n.user_id == user_id]

    def upsert(self, notification: Notification) -> Notification:
        data = self._load()
        for index, raw in enumerate(data):
            if raw.get("id") == notification.id:
                data[index] = notification.as_dict()
                break
        else:
            data.insert(0, notification.as_dict())
        self.kv.save(self.key, data)
        return notification

    def remove(self, notification_id: str) -> None:
        self.remove_where(lambda n: n.id == notification_id)

    def remove_where(self, predicate: Callable[[Notification], bool]) -> int:
        notifications = self.list()
        kept = [n for n in notifications if not predicate(n)]
        removed = len(notifications) - len(kept)
        if removed:
            self.kv.save(self.key, [n.as_dict() for n in kept])
        return removed

    def save_all(self, notifications: List[Notification]) -> None:
        self.kv.save(self.key, [n.as_dict() for n in notifications])


class SettingsStore:
    def __init__(self, kv: KeyValueStore, key: str = SITE_SETTINGS_KEY):
        self.kv = kv
        self.key = key

    def get(self) -> Optional[SiteSettings]:
        data = self.kv.load(self.key)
        if not isinstance(data, dict):
            return None
        return _read_record(self.key, SiteSettings.from_dict, data)

    def put(self, settings: SiteSettings) -> SiteSettings:
        self.kv.save(self.key, settings.as_dict())
        return settings


@dataclass
class VaultStores:
    """All entity stores sharing one KeyValueStore."""

    kv: KeyValueStore

    def __post_init__(self):
        self.users: MapStore[User] = MapStore(
            self.kv, USERS_KEY, User.from_dict, lambda user: user.uid
        )
        self.works: MapStore[Work] = MapStore(
            self.kv, WORKS_KEY, Work.from_dict, lambda work: work.id
        )
        self.comments = CommentStore(self.kv)
        self.notifications = NotificationStore(self.kv)
        self.settings = SettingsStore(self.kv)

    def find_user_by_email(self, email: str) -> Optional[User]:
        for user in self.users.list():
            if user.email == email:
                return user
        return None
