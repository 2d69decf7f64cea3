"""
Pydantic schemas for the vault HTTP API.

Payloads use the same camelCase field names as the stored documents.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared.types import Category, SocialIcon


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CredentialsRequest(ApiModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., max_length=256)


class EmailRequest(ApiModel):
    email: str


class PasswordRequest(ApiModel):
    new_password: str = Field(..., min_length=1, max_length=256)


class ProfileUpdateRequest(ApiModel):
    display_name: Optional[str] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    profile_id: Optional[str] = None
    profile_picture_url: Optional[str] = Field(
        default=None, alias="profilePictureURL"
    )


class UserModel(ApiModel):
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    bio: Optional[str] = None
    profile_id: Optional[str] = None
    profile_picture_url: Optional[str] = Field(
        default=None, alias="profilePictureURL"
    )


class SessionResponse(ApiModel):
    user: Optional[UserModel] = None
    is_owner: bool = False


class WorkCreateRequest(ApiModel):
    title: str = Field(..., min_length=1, max_length=300)
    tagline: str = Field(default="", max_length=500)
    category: Category
    file_url: str = Field(..., alias="fileURL")
    file_name: str
    cover_image_url: Optional[str] = Field(default=None, alias="coverImageURL")


class WorkModel(ApiModel):
    id: str
    title: str
    tagline: str
    category: Category
    file_url: str = Field(..., alias="fileURL")
    file_name: str
    upload_date: datetime
    owner_id: str
    cover_image_url: Optional[str] = Field(default=None, alias="coverImageURL")
    view_count: int = 0
    likes: int = 0
    like_user_ids: list[str] = Field(default_factory=list)


class ListWorksResponse(ApiModel):
    works: list[WorkModel]


class ViewRequest(ApiModel):
    viewer_session: Optional[str] = None


class ViewResponse(ApiModel):
    counted: bool
    work: WorkModel


class CommentCreateRequest(ApiModel):
    text: str = Field(..., min_length=1, max_length=5000)


class CommentModel(ApiModel):
    id: str
    work_id: str
    user_id: str
    user_name: str
    text: str
    created_at: datetime


class ListCommentsResponse(ApiModel):
    comments: list[CommentModel]


class SocialLinkModel(ApiModel):
    id: str
    name: str
    url: str
    icon: SocialIcon


class SiteSettingsModel(ApiModel):
    cover_pages: list[str] = Field(default_factory=list)
    taglines: list[str] = Field(default_factory=list)
    social_links: list[SocialLinkModel] = Field(default_factory=list)


class ActorModel(ApiModel):
    id: str
    name: str


class NotificationModel(ApiModel):
    id: str
    user_id: str
    message: str
    link: str
    read: bool
    created_at: datetime
    actor: ActorModel


class ListNotificationsResponse(ApiModel):
    notifications: list[NotificationModel]
    unread: int


class MarkReadRequest(ApiModel):
    ids: list[str]


class MarkReadResponse(ApiModel):
    updated: int


class UploadResponse(ApiModel):
    url: str
    name: str


class StatusResponse(ApiModel):
    status: Literal["ok"]
