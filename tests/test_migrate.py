import json
import os
import sys
from pathlib import Path

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from asset_portal.db.migrate import run_migrations
from asset_portal.db.session import Base

from asset_portal.models import asset as asset_model  # noqa: F401
from asset_portal.models import event as event_model  # noqa: F401
from asset_portal.models import items as items_model  # noqa: F401


def test_old_item_tables_gain_version_and_label_columns():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE component_items (id TEXT PRIMARY KEY, name TEXT, archive TEXT)"))
        conn.execute(text("INSERT INTO component_items (id, name, archive) VALUES ('BAT-1', 'Battery', '[]')"))
        conn.execute(text("CREATE TABLE component_relations (id INTEGER PRIMARY KEY, parent_id TEXT, component_id TEXT)"))
    Base.metadata.create_all(bind=engine)

    run_migrations(engine)
    run_migrations(engine)

    inspector = inspect(engine)
    assert "archive_version" in {c["name"] for c in inspector.get_columns("component_items")}
    assert "relation" in {c["name"] for c in inspector.get_columns("component_relations")}
    with engine.connect() as conn:
        assert conn.execute(text("SELECT archive_version FROM component_items")).scalar() == 0
    index_names = {ix["name"] for ix in inspector.get_indexes("events")}
    assert "ix_events_asset_date" in index_names


def test_archive_records_without_ids_are_backfilled():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    legacy = '[{"status": "Active", "purchase_order_number": "PO-1"}, {"id": "kept", "status": "Inactive"}]'
    with engine.begin() as conn:
        conn.execute(
            text("INSERT INTO complementary_items (id, name, archive, archive_version) VALUES ('CHG-1', 'Charger', :a, 1)"),
            {"a": legacy},
        )

    run_migrations(engine)
    with engine.connect() as conn:
        first = json.loads(conn.execute(text("SELECT archive FROM complementary_items")).scalar())
    run_migrations(engine)
    with engine.connect() as conn:
        second = json.loads(conn.execute(text("SELECT archive FROM complementary_items")).scalar())

    assert first[0]["id"]
    assert first[0]["purchase_order_number"] == "PO-1"
    assert first[1]["id"] == "kept"
    assert second == first
