"""SQLAlchemy-backed document store.

Documents live in a single ``documents`` table keyed by (collection, id) with
a JSON body. Filtering and ordering run in Python with the same helpers as the
in-memory store, so both adapters answer queries identically. Blocking
SQLAlchemy calls are off-loaded with ``asyncio.to_thread``; watches are
in-process and dispatched back on the event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from coachsync.core.errors import StoreError
from coachsync.core.ordering import ensure_utc, utc_now
from coachsync.db.models import DocumentRow
from coachsync.db.session import create_db_engine, create_session_factory, get_session
from coachsync.store.base import BaseDocumentStore, Document

DATETIME_TAG = "$datetime"


def encode_value(value: Any) -> Any:
    """Make a document body JSON-safe, tagging datetimes."""
    if isinstance(value, datetime):
        return {DATETIME_TAG: ensure_utc(value).isoformat()}
    if isinstance(value, dict):
        return {key: encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value


def decode_value(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {DATETIME_TAG}:
            return datetime.fromisoformat(value[DATETIME_TAG])
        return {key: decode_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_value(item) for item in value]
    return value


def _row_timestamp(data: Document, field: str) -> datetime:
    value = data.get(field)
    if isinstance(value, datetime):
        return ensure_utc(value).replace(tzinfo=None)
    return utc_now().replace(tzinfo=None)


class SqlDocumentStore(BaseDocumentStore):
    """Document store over any SQLAlchemy-supported database."""

    name = "sql"

    def __init__(self, database_url: str | None = None, engine: Engine | None = None) -> None:
        super().__init__()
        if engine is None:
            if database_url is None:
                raise ValueError("SqlDocumentStore requires a database_url or an engine")
            engine = create_db_engine(database_url)
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except IntegrityError as e:
            raise StoreError.wrap(e, "already-exists") from e
        except OperationalError as e:
            logger.error(f"[STORE] Database unavailable: {e}")
            raise StoreError.wrap(e, "unavailable") from e
        except SQLAlchemyError as e:
            logger.exception("[STORE] Database error")
            raise StoreError.wrap(e, "internal") from e

    def _load(self, collection: str, doc_id: str) -> Document | None:
        with get_session(self._session_factory) as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if row is None:
                return None
            return {"id": row.id, **decode_value(row.data)}

    def _load_all(self, collection: str) -> list[Document]:
        with get_session(self._session_factory) as session:
            rows = session.execute(
                select(DocumentRow).where(DocumentRow.collection == collection).order_by(DocumentRow.created_at)
            ).scalars()
            return [{"id": row.id, **decode_value(row.data)} for row in rows]

    def _save(self, collection: str, doc_id: str, data: Document) -> None:
        with get_session(self._session_factory) as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if row is None:
                row = DocumentRow(collection=collection, id=doc_id, created_at=_row_timestamp(data, "createdAt"))
                session.add(row)
            row.data = encode_value(data)
            row.updated_at = _row_timestamp(data, "updatedAt")

    def _remove(self, collection: str, doc_id: str) -> bool:
        with get_session(self._session_factory) as session:
            row = session.get(DocumentRow, (collection, doc_id))
            if row is None:
                return False
            session.delete(row)
            return True

    def dispose(self) -> None:
        self._engine.dispose()
