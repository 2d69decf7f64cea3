import unittest

from shared.types import Category, Comment, Work
from vault.kv import InMemoryKeyValueStore
from vault.notifications import (
    InProcessNotificationFeed,
    NotificationDispatcher,
    PollingNotificationFeed,
    comment_notification,
)
from vault.stores import NotificationStore


def _work() -> Work:
    return Work(
        id="work-1",
        title="The Crimson Cipher",
        tagline="",
        category=Category.STORY,
        file_url="#",
        file_name="c.pdf",
        owner_id="owner-1",
    )


def _comment(user_id: str = "reader-1") -> Comment:
    return Comment(
        id="comment-1",
        work_id="work-1",
        user_id=user_id,
        user_name="BookwormReader",
        text="Great read",
    )


class CommentNotificationTests(unittest.TestCase):
    def test_builds_owner_notification(self):
        notification = comment_notification(_work(), _comment())
        self.assertEqual(notification.user_id, "owner-1")
        self.assertEqual(
            notification.message,
            'BookwormReader commented on your work: "The Crimson Cipher"',
        )
        self.assertEqual(notification.link, "/story/work-1")
        self.assertEqual(notification.actor.name, "BookwormReader")
        self.assertFalse(notification.read)

    def test_skips_self_comment(self):
        self.assertIsNone(comment_notification(_work(), _comment(user_id="owner-1")))


class FeedTests(unittest.TestCase):
    def setUp(self):
        self.store = NotificationStore(InMemoryKeyValueStore())

    def test_polling_feed_delivers_once(self):
        feed = PollingNotificationFeed(self.store)
        dispatcher = NotificationDispatcher(self.store, feed)
        delivered = []

        feed.subscribe("owner-1", delivered.append)
        dispatcher.dispatch_comment(_work(), _comment())

        self.assertEqual(delivered, [[]])
        self.assertEqual(len(self.store.list_for("owner-1")), 1)

    def test_in_process_feed_redelivers_for_recipient(self):
        feed = InProcessNotificationFeed(self.store)
        dispatcher = NotificationDispatcher(self.store, feed)
        owner_updates = []
        reader_updates = []

        unsubscribe = feed.subscribe("owner-1", owner_updates.append)
        feed.subscribe("reader-1", reader_updates.append)
        dispatcher.dispatch_comment(_work(), _comment())

        self.assertEqual(len(owner_updates), 2)
        self.assertEqual(len(owner_updates[-1]), 1)
        self.assertEqual(reader_updates, [[]])

        unsubscribe()
        dispatcher.dispatch_comment(_work(), _comment())
        self.assertEqual(len(owner_updates), 2)

    def test_unsubscribing_last_listener_forgets_the_user(self):
        feed = InProcessNotificationFeed(self.store)
        first = feed.subscribe("owner-1", lambda notifications: None)
        second = feed.subscribe("owner-1", lambda notifications: None)

        first()
        self.assertIn("owner-1", feed._listeners)
        second()
        self.assertNotIn("owner-1", feed._listeners)
        # A repeated unsubscribe stays a no-op.
        second()
        self.assertNotIn("owner-1", feed._listeners)

    def test_self_comment_is_not_stored(self):
        dispatcher = NotificationDispatcher(self.store, PollingNotificationFeed(self.store))
        self.assertIsNone(dispatcher.dispatch_comment(_work(), _comment("owner-1")))
        self.assertEqual(self.store.list(), [])


if __name__ == "__main__":
    unittest.main()
