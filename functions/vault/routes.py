"""
HTTP routes for the vault API.

The session is the single pointer kept in the document store, not a
per-client cookie or token. A sign-in through any client therefore
authenticates every client of the same deployment, and require_user or
require_owner only check whoever signed in last.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from shared.types import Category, SiteSettings, User, Work
from vault.auth import Err, SessionManager
from vault.dependencies import (
    get_session_manager,
    get_storage_client,
    get_vault_service,
    get_view_tracker,
)
from vault.errors import ErrorKind
from vault.operations import VaultService, ViewTracker, social_links_from_payload
from vault.schemas import (
    CommentCreateRequest,
    CommentModel,
    CredentialsRequest,
    EmailRequest,
    ListCommentsResponse,
    ListNotificationsResponse,
    ListWorksResponse,
    MarkReadRequest,
    MarkReadResponse,
    NotificationModel,
    PasswordRequest,
    ProfileUpdateRequest,
    SessionResponse,
    SiteSettingsModel,
    StatusResponse,
    UploadResponse,
    UserModel,
    ViewRequest,
    ViewResponse,
    WorkCreateRequest,
    WorkModel,
)
from vault.storage import StorageClient

logger = logging.getLogger(__name__)

router = APIRouter()

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE_EMAIL: 409,
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.EMAIL_NOT_FOUND: 404,
    ErrorKind.NOT_AUTHENTICATED: 401,
    ErrorKind.NOT_AUTHORIZED: 403,
    ErrorKind.VALIDATION_FAILURE: 422,
    ErrorKind.STORAGE_FAILURE: 500,
}


def _user_model(user: User) -> UserModel:
    return UserModel.model_validate(user.as_dict())


def _work_model(work: Work) -> WorkModel:
    return WorkModel.model_validate(work.as_dict())


def _session_response(sessions: SessionManager, user: Optional[User]) -> SessionResponse:
    return SessionResponse(
        user=_user_model(user) if user else None,
        is_owner=sessions.is_owner(user),
    )


def _raise_for(result: Err) -> None:
    raise HTTPException(
        status_code=STATUS_BY_KIND[result.kind],
        detail={"kind": result.kind.value, "message": result.message},
    )


def require_user(
    sessions: SessionManager = Depends(get_session_manager),
) -> User:
    user = sessions.current_user()
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_owner(
    user: User = Depends(require_user),
    sessions: SessionManager = Depends(get_session_manager),
) -> User:
    if not sessions.is_owner(user):
        raise HTTPException(status_code=403, detail="Only the owner can do that")
    return user


def _require_confirmation(confirm: bool) -> None:
    if not confirm:
        raise HTTPException(
            status_code=400, detail="Deletion must be confirmed with confirm=true"
        )


# Auth


@router.post("/auth/sign-up", response_model=SessionResponse, status_code=201)
def sign_up(
    payload: CredentialsRequest,
    sessions: SessionManager = Depends(get_session_manager),
):
    result = sessions.sign_up(payload.email, payload.password)
    if isinstance(result, Err):
        _raise_for(result)
    return _session_response(sessions, result.value)


@router.post("/auth/sign-in", response_model=SessionResponse)
def sign_in(
    payload: CredentialsRequest,
    sessions: SessionManager = Depends(get_session_manager),
):
    result = sessions.sign_in(payload.email, payload.password)
    if isinstance(result, Err):
        _raise_for(result)
    return _session_response(sessions, result.value)


@router.post("/auth/sign-out", response_model=StatusResponse)
def sign_out(sessions: SessionManager = Depends(get_session_manager)):
    sessions.sign_out()
    return StatusResponse(status="ok")


@router.get("/auth/me", response_model=SessionResponse)
def current_session(sessions: SessionManager = Depends(get_session_manager)):
    return _session_response(sessions, sessions.current_user())


@router.patch("/auth/profile", response_model=UserModel)
def update_profile(
    payload: ProfileUpdateRequest,
    sessions: SessionManager = Depends(get_session_manager),
):
    updated = sessions.update_profile(payload.model_dump(exclude_unset=True))
    return _user_model(updated)


@router.post("/auth/password", response_model=StatusResponse)
def update_password(
    payload: PasswordRequest,
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.update_password(payload.new_password)
    return StatusResponse(status="ok")


@router.post("/auth/forgot-password", response_model=StatusResponse)
def forgot_password(
    payload: EmailRequest,
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.forgot_password(payload.email)
    return StatusResponse(status="ok")


# Users


@router.get("/users/{uid}", response_model=UserModel)
def get_user(uid: str, sessions: SessionManager = Depends(get_session_manager)):
    user = sessions.get_user_by_id(uid)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _user_model(user)


@router.get("/owner", response_model=UserModel)
def get_owner(sessions: SessionManager = Depends(get_session_manager)):
    owner = sessions.get_owner_profile()
    if not owner:
        raise HTTPException(status_code=404, detail="Owner profile not found")
    return _user_model(owner)


# Works


@router.get("/works", response_model=ListWorksResponse)
def list_works(
    category: Optional[Category] = Query(None),
    service: VaultService = Depends(get_vault_service),
):
    works = (
        service.get_works_by_category(category) if category else service.get_works()
    )
    return ListWorksResponse(works=[_work_model(work) for work in works])


@router.post("/works", response_model=WorkModel, status_code=201)
def add_work(
    payload: WorkCreateRequest,
    owner: User = Depends(require_owner),
    service: VaultService = Depends(get_vault_service),
):
    data = payload.model_dump()
    data["owner_id"] = owner.uid
    return _work_model(service.add_work(data))


@router.get("/works/{work_id}", response_model=WorkModel)
def get_work(work_id: str, service: VaultService = Depends(get_vault_service)):
    work = service.get_work_by_id(work_id)
    if not work:
        raise HTTPException(status_code=404, detail="Work not found")
    return _work_model(work)


@router.delete("/works/{work_id}", response_model=StatusResponse)
def delete_work(
    work_id: str,
    confirm: bool = Query(False),
    owner: User = Depends(require_owner),
    service: VaultService = Depends(get_vault_service),
):
    _require_confirmation(confirm)
    work = service.get_work_by_id(work_id)
    if not work:
        raise HTTPException(status_code=404, detail="Work not found")
    service.delete_work(work)
    return StatusResponse(status="ok")


@router.post("/works/{work_id}/view", response_model=ViewResponse)
def record_view(
    work_id: str,
    payload: Optional[ViewRequest] = None,
    service: VaultService = Depends(get_vault_service),
    tracker: ViewTracker = Depends(get_view_tracker),
):
    if payload and payload.viewer_session:
        counted = tracker.record_view(payload.viewer_session, work_id)
        work = service.get_work_by_id(work_id)
    else:
        counted = True
        work = service.increment_view_count(work_id)
    if not work:
        raise HTTPException(status_code=404, detail="Work not found")
    return ViewResponse(counted=counted, work=_work_model(work))


@router.post("/works/{work_id}/like", response_model=WorkModel)
def toggle_like(
    work_id: str,
    user: User = Depends(require_user),
    service: VaultService = Depends(get_vault_service),
):
    return _work_model(service.toggle_like(work_id, user.uid))


# Comments


@router.get("/works/{work_id}/comments", response_model=ListCommentsResponse)
def list_comments(work_id: str, service: VaultService = Depends(get_vault_service)):
    comments = service.get_comments(work_id)
    return ListCommentsResponse(
        comments=[CommentModel.model_validate(c.as_dict()) for c in comments]
    )


@router.post(
    "/works/{work_id}/comments", response_model=CommentModel, status_code=201
)
def add_comment(
    work_id: str,
    payload: CommentCreateRequest,
    user: User = Depends(require_user),
    service: VaultService = Depends(get_vault_service),
):
    comment = service.add_comment(
        {
            "work_id": work_id,
            "user_id": user.uid,
            "user_name": user.display_name or (user.email or "").split("@")[0],
            "text": payload.text,
        }
    )
    return CommentModel.model_validate(comment.as_dict())


@router.delete("/works/{work_id}/comments/{comment_id}", response_model=StatusResponse)
def delete_comment(
    work_id: str,
    comment_id: str,
    confirm: bool = Query(False),
    owner: User = Depends(require_owner),
    service: VaultService = Depends(get_vault_service),
):
    _require_confirmation(confirm)
    service.delete_comment(work_id, comment_id)
    return StatusResponse(status="ok")


# Site settings


@router.get("/settings", response_model=SiteSettingsModel)
def get_site_settings(service: VaultService = Depends(get_vault_service)):
    return SiteSettingsModel.model_validate(service.get_site_settings().as_dict())


@router.put("/settings", response_model=SiteSettingsModel)
def update_site_settings(
    payload: SiteSettingsModel,
    owner: User = Depends(require_owner),
    service: VaultService = Depends(get_vault_service),
):
    settings = SiteSettings(
        cover_pages=payload.cover_pages,
        taglines=payload.taglines,
        social_links=social_links_from_payload(
            link.model_dump() for link in payload.social_links
        ),
    )
    saved = service.update_site_settings(settings)
    return SiteSettingsModel.model_validate(saved.as_dict())


# Notifications


@router.get("/notifications", response_model=ListNotificationsResponse)
def list_notifications(
    user: User = Depends(require_user),
    service: VaultService = Depends(get_vault_service),
):
    delivered = []
    unsubscribe = service.get_notifications(user.uid, delivered.append)
    unsubscribe()
    notifications = delivered[-1] if delivered else []
    return ListNotificationsResponse(
        notifications=[
            NotificationModel.model_validate(n.as_dict()) for n in notifications
        ],
        unread=sum(1 for n in notifications if not n.read),
    )


@router.post("/notifications/read", response_model=MarkReadResponse)
def mark_notifications_read(
    payload: MarkReadRequest,
    user: User = Depends(require_user),
    service: VaultService = Depends(get_vault_service),
):
    own_ids = {n.id for n in service.list_notifications(user.uid)}
    updated = service.mark_notifications_as_read(
        [nid for nid in payload.ids if nid in own_ids]
    )
    return MarkReadResponse(updated=updated)


# Uploads


@router.post("/uploads", response_model=UploadResponse, status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    user: User = Depends(require_user),
    storage: StorageClient = Depends(get_storage_client),
):
    data = await file.read()
    uploaded = storage.upload_file(
        data,
        file.filename or "",
        on_progress=lambda percent: logger.debug(
            "Upload %s at %.0f%%", file.filename, percent
        ),
    )
    return UploadResponse(url=uploaded.url, name=uploaded.name)
