"""
Domain operations for works, comments, likes, views, site settings and
notifications.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from shared.types import (
    Category,
    Comment,
    Notification,
    SiteSettings,
    SocialIcon,
    SocialLink,
    Work,
    normalize_taglines,
    parse_datetime,
    utc_now,
)
from vault.errors import NotFound, StorageFailure, ValidationFailure, VaultError
from vault.notifications import (
    NotificationDispatcher,
    NotificationFeed,
    NotificationListener,
    work_link,
)
from vault.storage import StorageClient
from vault.stores import VaultStores

logger = logging.getLogger(__name__)

REQUIRED_WORK_FIELDS = ("title", "category", "file_url", "file_name", "owner_id")
REQUIRED_COMMENT_FIELDS = ("work_id", "user_id", "user_name", "text")


def _require(data: dict, names: Iterable[str]) -> None:
    missing = [name for name in names if not str(data.get(name) or "").strip()]
    if missing:
        raise ValidationFailure(f"Missing required fields: {', '.join(missing)}")


class VaultService:
    def __init__(
        self,
        stores: VaultStores,
        feed: NotificationFeed,
        storage: Optional[StorageClient] = None,
    ):
        self.stores = stores
        self.feed = feed
        self.storage = storage
        self.dispatcher = NotificationDispatcher(stores.notifications, feed)

    # Works

    def add_work(self, data: dict) -> Work:
        _require(data, REQUIRED_WORK_FIELDS)
        try:
            category = Category(data["category"])
        except ValueError:
            raise ValidationFailure(f"Unknown category: {data['category']}")
        upload_date = data.get("upload_date")
        work = Work(
            id=f"work-{uuid.uuid4().hex}",
            title=data["title"],
            tagline=data.get("tagline") or "",
            category=category,
            file_url=data["file_url"],
            file_name=data["file_name"],
            owner_id=data["owner_id"],
            upload_date=parse_datetime(upload_date) if upload_date else utc_now(),
            cover_image_url=data.get("cover_image_url"),
        )
        self.stores.works.upsert(work)
        logger.info("Added work %s (%s)", work.id, work.title)
        return work

    def get_works(self) -> List[Work]:
        return sorted(
            self.stores.works.list(), key=lambda work: work.upload_date, reverse=True
        )

    def get_works_by_category(self, category: Category) -> List[Work]:
        return [work for work in self.get_works() if work.category == category]

    def get_work_by_id(self, work_id: str) -> Optional[Work]:
        return self.stores.works.get(work_id)

    def _get_work(self, work_id: str) -> Work:
        work = self.stores.works.get(work_id)
        if not work:
            raise NotFound(f"Work {work_id} not found.")
        return work

    def delete_work(self, work: Work) -> None:
        """
        Remove a work together with its comments and notifications.

        The steps run in order without a transaction. If one fails the
        error names the step and whatever already ran stays applied.
        """
        steps: List[Tuple[str, Callable[[], object]]] = [
            ("work", lambda: self.stores.works.remove(work.id)),
            ("comments", lambda: self.stores.comments.remove_all(work.id)),
            (
                "notifications",
                lambda: self.stores.notifications.remove_where(
                    lambda n: n.link == work_link(work.id)
                ),
            ),
        ]
        for step, action in steps:
            try:
                action()
            except VaultError as exc:
                raise StorageFailure(
                    f"Deleting work {work.id} failed at {step}: {exc.message}"
                ) from exc
        self._delete_uploads(work)
        logger.info("Deleted work %s", work.id)

    def _delete_uploads(self, work: Work) -> None:
        if not self.storage:
            return
        for url in (work.file_url, work.cover_image_url):
            if not url:
                continue
            try:
                self.storage.delete_file(url)
            except VaultError:
                logger.warning("Could not delete upload %s of work %s", url, work.id)

    def increment_view_count(self, work_id: str) -> Work:
        work = self._get_work(work_id)
        work.view_count += 1
        return self.stores.works.upsert(work)

    def toggle_like(self, work_id: str, user_id: str) -> Work:
        work = self._get_work(work_id)
        if user_id in work.like_user_ids:
            work.like_user_ids = [uid for uid in work.like_user_ids if uid != user_id]
        else:
            work.like_user_ids.append(user_id)
        work.likes = max(0, len(work.like_user_ids))
        return self.stores.works.upsert(work)

    # Comments

    def get_comments(self, work_id: str) -> List[Comment]:
        return sorted(
            self.stores.comments.list_for(work_id),
            key=lambda comment: comment.created_at,
            reverse=True,
        )

    def add_comment(self, data: dict) -> Comment:
        _require(data, REQUIRED_COMMENT_FIELDS)
        work = self._get_work(data["work_id"])
        comment = Comment(
            id=f"comment-{uuid.uuid4().hex}",
            work_id=work.id,
            user_id=data["user_id"],
            user_name=data["user_name"],
            text=data["text"].strip(),
        )
        self.stores.comments.append(comment)
        self.dispatcher.dispatch_comment(work, comment)
        return comment

    def delete_comment(self, work_id: str, comment_id: str) -> None:
        if self.stores.comments.remove(work_id, comment_id):
            logger.info("Deleted comment %s on %s", comment_id, work_id)

    # Site settings

    def get_site_settings(self) -> SiteSettings:
        settings = self.stores.settings.get()
        if settings is None:
            return SiteSettings()
        settings.taglines = normalize_taglines(settings.taglines)
        return settings

    def update_site_settings(self, settings: SiteSettings) -> SiteSettings:
        for link in settings.social_links:
            if not isinstance(link.icon, SocialIcon):
                raise ValidationFailure(f"Unknown social icon: {link.icon}")
        settings.taglines = normalize_taglines(settings.taglines)
        return self.stores.settings.put(settings)

    # Notifications

    def get_notifications(
        self, user_id: str, on_update: NotificationListener
    ) -> Callable[[], None]:
        return self.feed.subscribe(user_id, on_update)

    def list_notifications(self, user_id: str) -> List[Notification]:
        return self.stores.notifications.list_for(user_id)

    def mark_notifications_as_read(self, notification_ids: Iterable[str]) -> int:
        wanted = set(notification_ids)
        notifications = self.stores.notifications.list()
        changed = 0
        for notification in notifications:
            if notification.id in wanted and not notification.read:
                notification.read = True
                changed += 1
        if changed:
            self.stores.notifications.save_all(notifications)
        return changed


def social_links_from_payload(links: Iterable[dict]) -> List[SocialLink]:
    try:
        return [SocialLink.from_dict(link) for link in links]
    except ValueError as exc:
        raise ValidationFailure(str(exc)) from exc


@dataclass
class ViewTracker:
    """
    Remembers which (viewer session, work) pairs were already counted.

    increment_view_count always counts; this is the caller-side guard
    that keeps a session from counting the same work twice. At most
    max_markers pairs are kept; the least recently seen are forgotten
    first and would count again.
    """

    service: VaultService
    max_markers: int = 10_000
    seen: OrderedDict[Tuple[str, str], None] = field(default_factory=OrderedDict)

    def record_view(self, session_id: str, work_id: str) -> bool:
        marker = (session_id, work_id)
        if marker in self.seen:
            self.seen.move_to_end(marker)
            return False
        self.service.increment_view_count(work_id)
        self.seen[marker] = None
        while len(self.seen) > self.max_markers:
            self.seen.popitem(last=False)
        return True
