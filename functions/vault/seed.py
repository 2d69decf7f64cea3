"""
Default content written the first time a vault store is opened.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import List

from shared.types import (
    Actor,
    Category,
    Comment,
    Notification,
    SiteSettings,
    SocialIcon,
    SocialLink,
    User,
    Work,
    utc_now,
)
from vault.stores import (
    COMMENTS_KEY,
    NOTIFICATIONS_KEY,
    SITE_SETTINGS_KEY,
    USERS_KEY,
    WORKS_KEY,
    VaultStores,
)

logger = logging.getLogger(__name__)

OWNER_UID = "owner-001"
SAMPLE_WORK_ID = "work-001"
SAMPLE_READER = Actor(id="reader-001", name="BookwormReader")

DEFAULT_TAGLINES = [
    "Weaving tales of mystery and code.",
    "Documenting the untold stories of truth.",
    "Crafting articles that spark insight.",
    "Where imagination meets the written word.",
    "Exploring worlds, one page at a time.",
    "The architect of narratives.",
    "Penning the future, remembering the past.",
    "A universe of stories awaits.",
    "From concept to creation.",
    "The journey of a thousand words begins here.",
]


def default_owner(email: str, profile_id: str, display_name: str) -> User:
    return User(
        uid=OWNER_UID,
        email=email,
        display_name=display_name,
        bio=(
            "The creator of this vault, weaving tales of mystery, documentaries "
            "of truth, and articles of insight. Explore my world."
        ),
        profile_id=profile_id,
        profile_picture_url="https://picsum.photos/seed/owner/200",
    )


def default_work() -> Work:
    return Work(
        id=SAMPLE_WORK_ID,
        title="The Crimson Cipher",
        tagline="A tale of mystery and code.",
        category=Category.STORY,
        file_url="#",
        file_name="crimson_cipher.pdf",
        owner_id=OWNER_UID,
        cover_image_url=f"https://picsum.photos/seed/{SAMPLE_WORK_ID}/1200/800",
        view_count=123,
    )


def default_comment() -> Comment:
    return Comment(
        id="comment-001",
        work_id=SAMPLE_WORK_ID,
        user_id=SAMPLE_READER.id,
        user_name=SAMPLE_READER.name,
        text="This is an amazing start! Can't wait for the next chapter.",
    )


def default_site_settings() -> SiteSettings:
    return SiteSettings(
        cover_pages=[
            f"https://picsum.photos/seed/cover{i}/1920/1080" for i in range(1, 4)
        ],
        taglines=list(DEFAULT_TAGLINES),
        social_links=[
            SocialLink(
                id="sl-1",
                name="Facebook",
                url="https://facebook.com",
                icon=SocialIcon.FACEBOOK,
            ),
            SocialLink(
                id="sl-2",
                name="Instagram",
                url="https://instagram.com",
                icon=SocialIcon.INSTAGRAM,
            ),
        ],
    )


def default_notification() -> Notification:
    return Notification(
        id="notif-001",
        user_id=OWNER_UID,
        message=f'{SAMPLE_READER.name} commented on your work: "The Crimson Cipher"',
        link=f"/story/{SAMPLE_WORK_ID}",
        actor=SAMPLE_READER,
        created_at=utc_now() - timedelta(minutes=5),
    )


def seed_defaults(
    stores: VaultStores,
    *,
    owner_email: str,
    owner_profile_id: str,
    owner_display_name: str,
) -> List[str]:
    """
    Write default content for every key that does not exist yet.

    Existing documents are never touched, so calling this on every start
    is safe. Returns the keys that were seeded.
    """
    kv = stores.kv
    seeded: List[str] = []
    if not kv.exists(USERS_KEY):
        stores.users.upsert(
            default_owner(owner_email, owner_profile_id, owner_display_name)
        )
        seeded.append(USERS_KEY)
    if not kv.exists(WORKS_KEY):
        stores.works.upsert(default_work())
        seeded.append(WORKS_KEY)
    if not kv.exists(COMMENTS_KEY):
        stores.comments.append(default_comment())
        seeded.append(COMMENTS_KEY)
    if not kv.exists(SITE_SETTINGS_KEY):
        stores.settings.put(default_site_settings())
        seeded.append(SITE_SETTINGS_KEY)
    if not kv.exists(NOTIFICATIONS_KEY):
        stores.notifications.upsert(default_notification())
        seeded.append(NOTIFICATIONS_KEY)
    if seeded:
        logger.info("Seeded vault defaults for %s", ", ".join(seeded))
    return seeded
