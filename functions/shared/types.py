# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from datetime import datetime, timezone
from enum import StrEnum
from dataclasses import dataclass, field
from typing import Any, List, Optional

TAGLINE_SLOTS = 10


class Category(StrEnum):
    STORY = "Stories"
    DOCUMENTARY = "Documentaries"
    ARTICLE = "Articles"


class SocialIcon(StrEnum):
    FACEBOOK = "Facebook"
    INSTAGRAM = "Instagram"
    YOUTUBE = "Youtube"
    REDDIT = "Reddit"
    TWITTER = "Twitter"
    LINKEDIN = "Linkedin"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> datetime:
    """Accepts ISO strings (including a trailing "Z"), epoch seconds or datetimes."""
    if value is None:
        return utc_now()
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _get_value(data: dict, *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass
class User:
    uid: str
    email: Optional[str]
    display_name: Optional[str] = None
    bio: Optional[str] = None
    profile_id: Optional[str] = None
    profile_picture_url: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "bio": self.bio,
            "profileId": self.profile_id,
            "profilePictureURL": self.profile_picture_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            uid=_get_value(data, "uid"),
            email=_get_value(data, "email"),
            display_name=_get_value(data, "display_name", "displayName"),
            bio=_get_value(data, "bio"),
            profile_id=_get_value(data, "profile_id", "profileId"),
            profile_picture_url=_get_value(
                data, "profile_picture_url", "profilePictureURL"
            ),
        )


@dataclass
class Work:
    id: str
    title: str
    tagline: str
    category: Category
    file_url: str
    file_name: str
    owner_id: str
    upload_date: datetime = field(default_factory=utc_now)
    cover_image_url: Optional[str] = None
    view_count: int = 0
    likes: int = 0
    like_user_ids: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "tagline": self.tagline,
            "category": self.category.value,
            "fileURL": self.file_url,
            "fileName": self.file_name,
            "uploadDate": self.upload_date.isoformat(),
            "ownerId": self.owner_id,
            "coverImageURL": self.cover_image_url,
            "viewCount": self.view_count,
            "likes": self.likes,
            "likeUserIds": list(self.like_user_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Work":
        # Older records may carry duplicate likers or a drifted counter.
        like_user_ids = list(
            dict.fromkeys(_get_value(data, "like_user_ids", "likeUserIds") or [])
        )
        return cls(
            id=_get_value(data, "id"),
            title=_get_value(data, "title") or "",
            tagline=_get_value(data, "tagline") or "",
            category=Category(_get_value(data, "category")),
            file_url=_get_value(data, "file_url", "fileURL") or "",
            file_name=_get_value(data, "file_name", "fileName") or "",
            owner_id=_get_value(data, "owner_id", "ownerId"),
            upload_date=parse_datetime(_get_value(data, "upload_date", "uploadDate")),
            cover_image_url=_get_value(data, "cover_image_url", "coverImageURL"),
            view_count=max(0, int(_get_value(data, "view_count", "viewCount") or 0)),
            likes=len(like_user_ids),
            like_user_ids=like_user_ids,
        )


@dataclass
class Comment:
    id: str
    work_id: str
    user_id: str
    user_name: str
    text: str
    created_at: datetime = field(default_factory=utc_now)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "workId": self.work_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "text": self.text,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Comment":
        return cls(
            id=_get_value(data, "id"),
            work_id=_get_value(data, "work_id", "workId"),
            user_id=_get_value(data, "user_id", "userId"),
            user_name=_get_value(data, "user_name", "userName") or "",
            text=_get_value(data, "text") or "",
            created_at=parse_datetime(_get_value(data, "created_at", "createdAt")),
        )


@dataclass
class SocialLink:
    id: str
    name: str
    url: str
    icon: SocialIcon

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "icon": self.icon.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SocialLink":
        return cls(
            id=_get_value(data, "id"),
            name=_get_value(data, "name") or "",
            url=_get_value(data, "url") or "",
            icon=SocialIcon(_get_value(data, "icon")),
        )


def normalize_taglines(taglines: Optional[List[str]]) -> List[str]:
    """Pad or truncate to the fixed number of tagline slots."""
    slots = [tagline or "" for tagline in (taglines or [])][:TAGLINE_SLOTS]
    return slots + [""] * (TAGLINE_SLOTS - len(slots))


@dataclass
class SiteSettings:
    cover_pages: List[str] = field(default_factory=list)
    taglines: List[str] = field(default_factory=lambda: normalize_taglines(None))
    social_links: List[SocialLink] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "coverPages": list(self.cover_pages),
            "taglines": list(self.taglines),
            "socialLinks": [link.as_dict() for link in self.social_links],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SiteSettings":
        links = _get_value(data, "social_links", "socialLinks") or []
        return cls(
            cover_pages=list(_get_value(data, "cover_pages", "coverPages") or []),
            taglines=normalize_taglines(_get_value(data, "taglines")),
            social_links=[SocialLink.from_dict(link) for link in links],
        )


@dataclass
class Actor:
    id: str
    name: str


@dataclass
class Notification:
    id: str
    user_id: str
    message: str
    link: str
    actor: Actor
    read: bool = False
    created_at: datetime = field(default_factory=utc_now)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "message": self.message,
            "link": self.link,
            "read": self.read,
            "createdAt": self.created_at.isoformat(),
            "actor": {"id": self.actor.id, "name": self.actor.name},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        actor = _get_value(data, "actor") or {}
        return cls(
            id=_get_value(data, "id"),
            user_id=_get_value(data, "user_id", "userId"),
            message=_get_value(data, "message") or "",
            link=_get_value(data, "link") or "",
            actor=Actor(id=actor.get("id", ""), name=actor.get("name", "")),
            read=bool(_get_value(data, "read")),
            created_at=parse_datetime(_get_value(data, "created_at", "createdAt")),
        )
