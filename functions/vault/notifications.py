"""
Notification rules and delivery feeds.

Notifications are derived from domain operations (currently: a comment
on someone else's work). Delivery to readers goes through a
NotificationFeed so the polling behaviour can be swapped for a
subscription without touching the operations.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Protocol

from shared.types import Actor, Comment, Notification, Work
from vault.stores import NotificationStore

logger = logging.getLogger(__name__)

NotificationListener = Callable[[List[Notification]], None]


def work_link(work_id: str) -> str:
    return f"/story/{work_id}"


def comment_notification(work: Work, comment: Comment) -> Optional[Notification]:
    """Build the owner's notification for a comment, or None for self-comments."""
    if comment.user_id == work.owner_id:
        return None
    return Notification(
        id=f"notif-{uuid.uuid4().hex}",
        user_id=work.owner_id,
        message=f'{comment.user_name} commented on your work: "{work.title}"',
        link=work_link(work.id),
        actor=Actor(id=comment.user_id, name=comment.user_name),
    )


class NotificationFeed(Protocol):
    def subscribe(
        self, user_id: str, on_update: NotificationListener
    ) -> Callable[[], None]:
        ...

    def publish(self, notification: Notification) -> None:
        ...


class PollingNotificationFeed:
    """One-shot fetch-and-filter; later notifications need a new subscribe."""

    def __init__(self, store: NotificationStore):
        self.store = store

    def subscribe(
        self, user_id: str, on_update: NotificationListener
    ) -> Callable[[], None]:
        on_update(self.store.list_for(user_id))
        return lambda: None

    def publish(self, notification: Notification) -> None:
        return None


class InProcessNotificationFeed:
    """Re-delivers a recipient's full list whenever they get a new notification."""

    def __init__(self, store: NotificationStore):
        self.store = store
        self._listeners: Dict[str, List[NotificationListener]] = defaultdict(list)

    def subscribe(
        self, user_id: str, on_update: NotificationListener
    ) -> Callable[[], None]:
        self._listeners[user_id].append(on_update)
        on_update(self.store.list_for(user_id))

        def unsubscribe() -> None:
            listeners = self._listeners.get(user_id)
            if listeners and on_update in listeners:
                listeners.remove(on_update)
                if not listeners:
                    del self._listeners[user_id]

        return unsubscribe

    def publish(self, notification: Notification) -> None:
        listeners = list(self._listeners.get(notification.user_id, []))
        if not listeners:
            return
        current = self.store.list_for(notification.user_id)
        for listener in listeners:
            try:
                listener(current)
            except Exception:
                logger.exception(
                    "Notification listener failed for %s", notification.user_id
                )


class NotificationDispatcher:
    def __init__(self, store: NotificationStore, feed: NotificationFeed):
        self.store = store
        self.feed = feed

    def dispatch_comment(self, work: Work, comment: Comment) -> Optional[Notification]:
        notification = comment_notification(work, comment)
        if notification is None:
            logger.debug("Skipping self-notification for %s", work.owner_id)
            return None
        self.store.upsert(notification)
        logger.info(
            "Created comment notification %s for %s",
            notification.id,
            notification.user_id,
        )
        self.feed.publish(notification)
        return notification
