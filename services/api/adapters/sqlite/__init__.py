# services/api/adapters/sqlite/__init__.py
from __future__ import annotations

import json
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    event,
    func,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine

from ..base import RECORD_NOT_FOUND, sort_records

# ---- Engine (SQLite) with WAL & pragmas -------------------------------------

def _ensure_dir(path: str):
    d = os.path.dirname(path)
    if d and not os.path.isdir(d):
        os.makedirs(d, exist_ok=True)

def make_engine(db_url: str) -> Engine:
    # Create data dir if sqlite file
    if db_url.startswith("sqlite:///"):
        file_path = db_url.replace("sqlite:///", "", 1)
        _ensure_dir(file_path)

    engine = create_engine(db_url, future=True, pool_pre_ping=True)

    # Apply pragmas per-connection
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore
        if isinstance(dbapi_connection, sqlite3.Connection):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.close()

    return engine

# ---- Schema via SQLAlchemy Core ---------------------------------------------

metadata = MetaData()

# One document table for every collection; the record body is a JSON object,
# mirroring how the Firestore backend stores schemaless documents.
records = Table(
    "records",
    metadata,
    Column("collection", String, primary_key=True),
    Column("record_id", String, primary_key=True),
    Column("data", Text, nullable=False),
    Column("created_at", DateTime, nullable=False, default=datetime.utcnow),
)

Index("idx_records_collection", records.c.collection)

# ---- Adapter implementation --------------------------------------------------

def _row_to_dict(row) -> Dict[str, Any]:
    data = json.loads(row.data)
    data["id"] = row.record_id
    return data


@dataclass(frozen=True)
class SqliteAdapter:
    engine: Engine

    @classmethod
    def from_url(cls, db_url: str = "sqlite:///data/wedding.db") -> "SqliteAdapter":
        eng = make_engine(db_url)
        metadata.create_all(eng)
        return cls(engine=eng)

    def create_record(self, collection: str, data: Dict[str, Any]) -> str:
        record_id = uuid4().hex
        body = {k: v for k, v in data.items() if k != "id"}
        with self.engine.begin() as conn:
            conn.execute(
                insert(records).values(
                    collection=collection,
                    record_id=record_id,
                    data=json.dumps(body, default=str),
                    created_at=datetime.utcnow(),
                )
            )
        return record_id

    def get_record(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(records.c.record_id, records.c.data).where(
                    records.c.collection == collection,
                    records.c.record_id == record_id,
                )
            ).first()
        return _row_to_dict(row) if row else None

    def list_records(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
    ) -> List[Dict[str, Any]]:
        q = select(records.c.record_id, records.c.data).where(records.c.collection == collection)
        # json_extract yields 1/0 for JSON booleans, which compare equal to bound True/False
        for key, value in (filters or {}).items():
            q = q.where(func.json_extract(records.c.data, f"$.{key}") == value)

        with self.engine.begin() as conn:
            rows = conn.execute(q).all()
        return sort_records([_row_to_dict(r) for r in rows], order_by, descending)

    def update_record(self, collection: str, record_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(records.c.record_id, records.c.data).where(
                    records.c.collection == collection,
                    records.c.record_id == record_id,
                )
            ).first()
            if not row:
                raise ValueError(RECORD_NOT_FOUND)

            body = json.loads(row.data)
            body.update({k: v for k, v in updates.items() if k != "id"})
            conn.execute(
                update(records)
                .where(records.c.collection == collection, records.c.record_id == record_id)
                .values(data=json.dumps(body, default=str))
            )
        body["id"] = record_id
        return body

    def delete_record(self, collection: str, record_id: str) -> None:
        with self.engine.begin() as conn:
            res = conn.execute(
                delete(records).where(
                    records.c.collection == collection,
                    records.c.record_id == record_id,
                )
            )
            if res.rowcount == 0:
                raise ValueError(RECORD_NOT_FOUND)

    def ping(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(select(1)).first()
