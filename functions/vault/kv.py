"""
Key-value persistence for vault documents.

Each key holds one JSON blob. Implementations exist for an in-memory
dict (tests/dev), any SQLAlchemy URL (Postgres, or SQLite for tests) and
Redis. None of them offer transactions: callers do read-modify-write on
whole documents, which is only safe with a single writer.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Union

import redis
from redis import exceptions as redis_exceptions
from sqlalchemy import Column, Float, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from vault.errors import StorageFailure

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Durable string-keyed store of JSON documents."""

    def load(self, key: str) -> Optional[Any]:
        ...

    def save(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def exists(self, key: str) -> bool:
        ...


def _decode(key: str, raw: Optional[Union[str, bytes]]) -> Optional[Any]:
    if raw is None:
        return None
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.exception("Failed to parse stored document %s", key)
        return None


def _encode(value: Any) -> str:
    return json.dumps(value, default=str)


@dataclass
class InMemoryKeyValueStore:
    """Test double holding serialized documents in a dict."""

    documents: Dict[str, str] = field(default_factory=dict)

    def load(self, key: str) -> Optional[Any]:
        return _decode(key, self.documents.get(key))

    def save(self, key: str, value: Any) -> None:
        self.documents[key] = _encode(value)

    def delete(self, key: str) -> None:
        self.documents.pop(key, None)

    def exists(self, key: str) -> bool:
        return key in self.documents

    def reset(self) -> None:
        """Clear all stored documents (useful in tests)."""
        self.documents.clear()


class SqlKeyValueStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("VAULT_DATABASE_URL is required for SqlKeyValueStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def load(self, key: str) -> Optional[Any]:
        try:
            with self.Session() as session:
                row = session.get(DocumentRow, key)
                raw = row.value if row else None
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not read {key}: {exc}") from exc
        return _decode(key, raw)

    def save(self, key: str, value: Any) -> None:
        body = _encode(value)
        try:
            with self.Session() as session:
                row = session.get(DocumentRow, key)
                if row:
                    row.value = body
                    row.updated_at = time.time()
                else:
                    session.add(
                        DocumentRow(key=key, value=body, updated_at=time.time())
                    )
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not write {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with self.Session() as session:
                row = session.get(DocumentRow, key)
                if row:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not delete {key}: {exc}") from exc

    def exists(self, key: str) -> bool:
        try:
            with self.Session() as session:
                return session.get(DocumentRow, key) is not None
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not read {key}: {exc}") from exc


@dataclass
class RedisKeyValueStore:
    """Redis-backed store keeping each document as a string value."""

    url: str
    key_prefix: str = "vault:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def load(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(self._key(key))
        except redis_exceptions.RedisError as exc:
            raise StorageFailure(f"Could not read {key}: {exc}") from exc
        return _decode(key, raw)

    def save(self, key: str, value: Any) -> None:
        try:
            self.client.set(self._key(key), _encode(value))
        except redis_exceptions.RedisError as exc:
            raise StorageFailure(f"Could not write {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis_exceptions.RedisError as exc:
            raise StorageFailure(f"Could not delete {key}: {exc}") from exc

    def exists(self, key: str) -> bool:
        try:
            return bool(self.client.exists(self._key(key)))
        except redis_exceptions.RedisError as exc:
            raise StorageFailure(f"Could not read {key}: {exc}") from exc


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "kv_documents"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(Float, nullable=False)
