"""Idempotent in-place upgrades for SQLite databases created by older builds.

``Base.metadata.create_all`` only creates missing tables; columns added later
(archive versioning, relation labels) are patched in here, and archive
records written before records carried ids get one.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def _column_names(engine: Engine, table: str) -> set[str]:
    with engine.connect() as conn:
        rows = conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()
    return {row["name"] for row in rows}


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))
    logger.info("migration.column_added", extra={"extra_data": {"table": table, "column": col_def}})


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def _ensure_archive_versions(engine: Engine) -> None:
    for table in ("complementary_items", "component_items"):
        columns = _column_names(engine, table)
        if columns and "archive_version" not in columns:
            _add_column_sqlite(engine, table, "archive_version INTEGER NOT NULL DEFAULT 0")


def _backfill_archive_record_ids(engine: Engine) -> None:
    for table in ("complementary_items", "component_items"):
        if not _column_names(engine, table):
            continue
        with engine.begin() as conn:
            rows = conn.execute(text(f"SELECT id, archive FROM {table}")).all()
            for item_id, raw in rows:
                try:
                    records = json.loads(raw) if isinstance(raw, str) else raw
                except ValueError:
                    logger.warning("migration.archive_unreadable", extra={"extra_data": {"table": table, "id": item_id}})
                    continue
                if not isinstance(records, list):
                    continue
                missing = [r for r in records if isinstance(r, dict) and not r.get("id")]
                if not missing:
                    continue
                for record in missing:
                    record["id"] = uuid4().hex
                conn.execute(
                    text(f"UPDATE {table} SET archive = :archive WHERE id = :id"),
                    {"archive": json.dumps(records), "id": item_id},
                )
                logger.info(
                    "migration.archive_ids_backfilled",
                    extra={"extra_data": {"table": table, "id": item_id, "records": len(missing)}},
                )


def _ensure_relation_labels(engine: Engine) -> None:
    for table in ("complementary_relations", "component_relations"):
        columns = _column_names(engine, table)
        if columns and "relation" not in columns:
            _add_column_sqlite(engine, table, "relation TEXT NOT NULL DEFAULT ''")


def run_migrations(engine: Engine) -> None:
    if engine.dialect.name != "sqlite":
        return
    _ensure_archive_versions(engine)
    _backfill_archive_record_ids(engine)
    _ensure_relation_labels(engine)
    _create_index_if_not_exists(engine, "complementary_relations", "ix_complementary_relations_pair", ["parent_id", "complementary_id"], unique=True)
    _create_index_if_not_exists(engine, "component_relations", "ix_component_relations_pair", ["parent_id", "component_id"], unique=True)
    _create_index_if_not_exists(engine, "events", "ix_events_asset_date", ["asset_id", "event_date"])
