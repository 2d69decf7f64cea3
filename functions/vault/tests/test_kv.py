import time
import unittest
from unittest.mock import MagicMock, patch

from redis import exceptions as redis_exceptions

from vault.errors import StorageFailure
from vault.kv import DocumentRow, InMemoryKeyValueStore, RedisKeyValueStore, SqlKeyValueStore


class InMemoryKeyValueStoreTests(unittest.TestCase):
    def setUp(self):
        self.kv = InMemoryKeyValueStore()

    def test_missing_key_loads_none(self):
        self.assertIsNone(self.kv.load("nope"))
        self.assertFalse(self.kv.exists("nope"))

    def test_save_load_delete(self):
        self.kv.save("works", {"work-1": {"title": "T"}})
        self.assertTrue(self.kv.exists("works"))
        self.assertEqual(self.kv.load("works"), {"work-1": {"title": "T"}})

        self.kv.delete("works")
        self.assertIsNone(self.kv.load("works"))
        # Deleting twice is fine.
        self.kv.delete("works")

    def test_malformed_json_fails_soft(self):
        self.kv.documents["broken"] = "{not json"
        with self.assertLogs("vault.kv", level="ERROR"):
            self.assertIsNone(self.kv.load("broken"))


class SqlKeyValueStoreTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store.
    """

    def setUp(self):
        self.kv = SqlKeyValueStore("sqlite+pysqlite:///:memory:")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            SqlKeyValueStore("")

    def test_save_overwrites_and_loads(self):
        self.kv.save("settings", {"taglines": ["a"]})
        self.kv.save("settings", {"taglines": ["b"]})
        self.assertEqual(self.kv.load("settings"), {"taglines": ["b"]})
        self.assertTrue(self.kv.exists("settings"))

    def test_delete(self):
        self.kv.save("session", {"uid": "u1"})
        self.kv.delete("session")
        self.assertFalse(self.kv.exists("session"))
        self.assertIsNone(self.kv.load("session"))

    def test_malformed_row_fails_soft(self):
        with self.kv.Session() as session:
            session.add(DocumentRow(key="broken", value="[1, 2", updated_at=time.time()))
            session.commit()
        with self.assertLogs("vault.kv", level="ERROR"):
            self.assertIsNone(self.kv.load("broken"))


class RedisKeyValueStoreTests(unittest.TestCase):
    @patch("vault.kv.redis.Redis.from_url")
    def test_load_decodes_and_prefixes_keys(self, mock_from_url):
        client = MagicMock()
        client.get.return_value = b'{"uid": "u1"}'
        mock_from_url.return_value = client

        kv = RedisKeyValueStore(url="redis://localhost:6379/0", key_prefix="test:")
        self.assertEqual(kv.load("session"), {"uid": "u1"})
        client.get.assert_called_once_with("test:session")

    @patch("vault.kv.redis.Redis.from_url")
    def test_undecodable_bytes_fail_soft(self, mock_from_url):
        client = MagicMock()
        client.get.return_value = b"\xff\xfe{"
        mock_from_url.return_value = client

        kv = RedisKeyValueStore(url="redis://localhost:6379/0")
        with self.assertLogs("vault.kv", level="ERROR"):
            self.assertIsNone(kv.load("works"))

    @patch("vault.kv.redis.Redis.from_url")
    def test_save_serializes_json(self, mock_from_url):
        client = MagicMock()
        mock_from_url.return_value = client

        kv = RedisKeyValueStore(url="redis://localhost:6379/0")
        kv.save("works", {"a": 1})
        client.set.assert_called_once_with("vault:works", '{"a": 1}')

    @patch("vault.kv.redis.Redis.from_url")
    def test_connection_errors_become_storage_failures(self, mock_from_url):
        client = MagicMock()
        client.get.side_effect = redis_exceptions.ConnectionError("reset")
        mock_from_url.return_value = client

        kv = RedisKeyValueStore(url="redis://localhost:6379/0")
        with self.assertRaises(StorageFailure):
            kv.load("works")


if __name__ == "__main__":
    unittest.main()
