# local_storage.py
import json
import logging
from typing import List, Optional

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError

from .models import SchemaError, TrackerData, from_document, to_document

logger = logging.getLogger(__name__)

TRACKER_KEY = "tracker"

# -------------------------
# Schema (module-level, shared)
# -------------------------
metadata = MetaData()

local_items = Table(
    "local_storage", metadata,
    Column("key", String, primary_key=True),
    Column("value", Text, nullable=False),
)


def make_engine(database_url: str = "sqlite:///habitgrid_local.db"):
    """Create and return a SQLAlchemy engine (SQLite by default)."""
    return create_engine(database_url, future=True)


def init_db(engine):
    """Create tables if they do not exist."""
    metadata.create_all(engine)


class LocalStorage:
    """
    Key/value store on the local machine, always available.

    The tracker document lives under a single key; load() never fails and
    falls back to the default habit set.
    """

    def __init__(self, database_url: str = "sqlite:///habitgrid_local.db", engine=None):
        self.engine = engine if engine is not None else make_engine(database_url)
        init_db(self.engine)

    # ---------- raw items ----------
    def get_item(self, key: str) -> Optional[str]:
        with self.engine.connect() as conn:
            row = conn.execute(select(local_items.c.value).where(local_items.c.key == key)).first()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(local_items).where(local_items.c.key == key))
            conn.execute(local_items.insert().values(key=key, value=value))

    def remove_item(self, key: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(local_items).where(local_items.c.key == key))

    def keys(self) -> List[str]:
        with self.engine.connect() as conn:
            return [row[0] for row in conn.execute(select(local_items.c.key).order_by(local_items.c.key))]

    def clear(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(local_items))

    # ---------- persistence contract ----------
    def load(self) -> TrackerData:
        try:
            raw = self.get_item(TRACKER_KEY)
        except SQLAlchemyError as e:
            logger.error("Error reading local storage: %s", e)
            return TrackerData.default()

        if raw is None:
            return TrackerData.default()
        try:
            return from_document(json.loads(raw))
        except (json.JSONDecodeError, SchemaError) as e:
            logger.warning("Ignoring malformed local data: %s", e)
            return TrackerData.default()

    def save(self, data: TrackerData) -> bool:
        try:
            self.set_item(TRACKER_KEY, json.dumps(to_document(data), ensure_ascii=False))
        except SQLAlchemyError as e:
            logger.error("Error saving local data: %s", e)
        return True
