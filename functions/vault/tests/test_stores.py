import unittest

from shared.types import Actor, Category, Comment, Notification, Work
from vault.errors import StorageFailure
from vault.kv import InMemoryKeyValueStore
from vault.seed import OWNER_UID, SAMPLE_WORK_ID, seed_defaults
from vault.stores import (
    COMMENTS_KEY,
    NOTIFICATIONS_KEY,
    SITE_SETTINGS_KEY,
    USERS_KEY,
    WORKS_KEY,
    VaultStores,
)

OWNER_EMAIL = "owner@example.com"


def _seed(stores):
    return seed_defaults(
        stores,
        owner_email=OWNER_EMAIL,
        owner_profile_id="Admin_Owner",
        owner_display_name="The Owner",
    )


def _work(work_id: str) -> Work:
    return Work(
        id=work_id,
        title=f"Title {work_id}",
        tagline="",
        category=Category.ARTICLE,
        file_url="#",
        file_name="a.pdf",
        owner_id=OWNER_UID,
    )


class SeedTests(unittest.TestCase):
    def setUp(self):
        self.stores = VaultStores(InMemoryKeyValueStore())

    def test_seeds_every_document_once(self):
        seeded = _seed(self.stores)
        self.assertEqual(
            set(seeded),
            {USERS_KEY, WORKS_KEY, COMMENTS_KEY, SITE_SETTINGS_KEY, NOTIFICATIONS_KEY},
        )
        self.assertEqual(_seed(self.stores), [])

        owner = self.stores.users.get(OWNER_UID)
        self.assertEqual(owner.email, OWNER_EMAIL)
        self.assertEqual(owner.profile_id, "Admin_Owner")
        self.assertEqual(len(self.stores.comments.list_for(SAMPLE_WORK_ID)), 1)
        self.assertEqual(len(self.stores.settings.get().taglines), 10)

        notifications = self.stores.notifications.list_for(OWNER_UID)
        self.assertEqual(len(notifications), 1)
        self.assertFalse(notifications[0].read)

    def test_seed_does_not_clobber_existing_data(self):
        _seed(self.stores)
        self.stores.works.remove(SAMPLE_WORK_ID)
        self.stores.works.upsert(_work("work-x"))

        _seed(self.stores)
        self.assertIsNone(self.stores.works.get(SAMPLE_WORK_ID))
        self.assertIsNotNone(self.stores.works.get("work-x"))

    def test_sample_work_counters_are_consistent(self):
        _seed(self.stores)
        work = self.stores.works.get(SAMPLE_WORK_ID)
        self.assertEqual(work.likes, len(work.like_user_ids))
        self.assertEqual(work.view_count, 123)


class MapStoreTests(unittest.TestCase):
    def setUp(self):
        self.stores = VaultStores(InMemoryKeyValueStore())

    def test_list_keeps_insertion_order(self):
        for work_id in ("w3", "w1", "w2"):
            self.stores.works.upsert(_work(work_id))
        self.assertEqual([w.id for w in self.stores.works.list()], ["w3", "w1", "w2"])

    def test_upsert_replaces_and_remove_is_idempotent(self):
        work = _work("w1")
        self.stores.works.upsert(work)
        work.title = "Renamed"
        self.stores.works.upsert(work)
        self.assertEqual(self.stores.works.get("w1").title, "Renamed")
        self.assertEqual(len(self.stores.works.list()), 1)

        self.stores.works.remove("w1")
        self.stores.works.remove("w1")
        self.assertIsNone(self.stores.works.get("w1"))

    def test_drifted_like_counter_is_rederived(self):
        raw = _work("w1").as_dict()
        raw["likes"] = 42
        raw["likeUserIds"] = ["u1", "u1", "u2"]
        self.stores.kv.save(WORKS_KEY, {"w1": raw})

        work = self.stores.works.get("w1")
        self.assertEqual(work.like_user_ids, ["u1", "u2"])
        self.assertEqual(work.likes, 2)

    def test_non_mapping_document_reads_as_empty(self):
        self.stores.kv.save(USERS_KEY, ["not", "a", "map"])
        self.assertEqual(self.stores.users.list(), [])

    def test_unknown_category_is_a_storage_failure(self):
        raw = _work("w1").as_dict()
        raw["category"] = "Poems"
        self.stores.kv.save(WORKS_KEY, {"w1": raw})

        with self.assertLogs("vault.stores", level="ERROR"):
            with self.assertRaises(StorageFailure) as ctx:
                self.stores.works.list()
        self.assertIn(WORKS_KEY, ctx.exception.message)

    def test_bad_timestamp_is_a_storage_failure(self):
        raw = _work("w1").as_dict()
        raw["uploadDate"] = "not a date"
        self.stores.kv.save(WORKS_KEY, {"w1": raw})

        with self.assertLogs("vault.stores", level="ERROR"):
            with self.assertRaises(StorageFailure):
                self.stores.works.get("w1")

    def test_unknown_social_icon_is_a_storage_failure(self):
        self.stores.kv.save(
            SITE_SETTINGS_KEY,
            {
                "socialLinks": [
                    {"id": "sl-1", "name": "M", "url": "https://m.example", "icon": "Mastodon"}
                ]
            },
        )
        with self.assertLogs("vault.stores", level="ERROR"):
            with self.assertRaises(StorageFailure):
                self.stores.settings.get()


class CommentAndNotificationStoreTests(unittest.TestCase):
    def setUp(self):
        self.stores = VaultStores(InMemoryKeyValueStore())

    def test_comment_remove(self):
        comment = Comment(id="c1", work_id="w1", user_id="u1", user_name="U", text="hi")
        self.stores.comments.append(comment)
        self.assertFalse(self.stores.comments.remove("w1", "missing"))
        self.assertFalse(self.stores.comments.remove("w2", "c1"))
        self.assertTrue(self.stores.comments.remove("w1", "c1"))
        self.assertEqual(self.stores.comments.list_for("w1"), [])

    def test_notification_upsert_prepends_new_and_replaces_existing(self):
        first = Notification(
            id="n1", user_id="u1", message="m1", link="/story/w1", actor=Actor("a", "A")
        )
        second = Notification(
            id="n2", user_id="u1", message="m2", link="/story/w2", actor=Actor("a", "A")
        )
        self.stores.notifications.upsert(first)
        self.stores.notifications.upsert(second)
        self.assertEqual([n.id for n in self.stores.notifications.list()], ["n2", "n1"])

        first.read = True
        self.stores.notifications.upsert(first)
        self.assertEqual([n.id for n in self.stores.notifications.list()], ["n2", "n1"])
        self.assertTrue(self.stores.notifications.get("n1").read)

        self.stores.notifications.remove("n2")
        self.assertIsNone(self.stores.notifications.get("n2"))


if __name__ == "__main__":
    unittest.main()
