import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from asset_portal.db.session import Base
from asset_portal.core.errors import ArchiveConflictError, ItemNotFoundError
from asset_portal.crud.archive import (
    append_archive_record,
    get_item,
    normalize_records,
    remove_archive_record,
    replace_archive,
    update_archive_record,
)
from asset_portal.crud.assets import create_asset_bundle

# Ensure models are imported so metadata is populated
from asset_portal.models import asset as asset_model  # noqa: F401
from asset_portal.models import items as items_model  # noqa: F401


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        create_asset_bundle(
            session,
            {"id": "LAP-001", "name": "Laptop"},
            [{"id": "CHG-001", "name": "Charger", "purchase_order_number": "PO-1", "purchase_price": 500_000}],
            [{"id": "BAT-001", "name": "Battery"}],
        )
        yield session
    finally:
        session.close()


def _record(status="Active", **fields):
    return {"status": status, **fields}


def test_last_write_wins_without_version(db_session):
    a = [_record(purchase_order_number="PO-A")]
    b = [_record(purchase_order_number="PO-B"), _record("Inactive", purchase_order_number="PO-B")]

    replace_archive(db_session, "complementary", "CHG-001", a)
    item = replace_archive(db_session, "complementary", "CHG-001", b)

    assert [r["purchase_order_number"] for r in item.archive] == ["PO-B", "PO-B"]
    assert [r["status"] for r in item.archive] == ["Active", "Inactive"]
    assert item.archive_version == 3


def test_replace_assigns_ids_and_keeps_given_ones(db_session):
    item = replace_archive(db_session, "component", "BAT-001", [_record(id="keep-me"), _record()])
    assert item.archive[0]["id"] == "keep-me"
    assert item.archive[1]["id"]
    assert item.archive[1]["id"] != "keep-me"


def test_empty_archive_is_allowed(db_session):
    item = replace_archive(db_session, "component", "BAT-001", [])
    assert item.archive == []


def test_stale_version_is_rejected(db_session):
    current = get_item(db_session, "complementary", "CHG-001").archive_version
    replace_archive(db_session, "complementary", "CHG-001", [_record(notes="first")], expected_version=current)

    with pytest.raises(ArchiveConflictError) as excinfo:
        replace_archive(db_session, "complementary", "CHG-001", [_record(notes="second")], expected_version=current)

    assert excinfo.value.actual == current + 1
    item = get_item(db_session, "complementary", "CHG-001")
    assert [r["notes"] for r in item.archive] == ["first"]


def test_matching_version_bumps(db_session):
    item = replace_archive(db_session, "component", "BAT-001", [_record()], expected_version=1)
    assert item.archive_version == 2


def test_unknown_item_and_type(db_session):
    with pytest.raises(ItemNotFoundError):
        replace_archive(db_session, "component", "NOPE", [])
    with pytest.raises(ValueError):
        replace_archive(db_session, "gadget", "BAT-001", [])


def test_status_is_required_on_every_record():
    with pytest.raises(ValueError):
        normalize_records([{"purchase_order_number": "PO-1"}])
    with pytest.raises(ValueError):
        normalize_records([{"status": "Broken"}])


def test_record_commands_address_by_id(db_session):
    item = append_archive_record(db_session, "complementary", "CHG-001", _record("Inactive", notes="moved"))
    assert len(item.archive) == 2
    first_id, second_id = item.archive[0]["id"], item.archive[1]["id"]
    assert item.archive[1]["notes"] == "moved"

    item = update_archive_record(
        db_session, "complementary", "CHG-001", first_id, _record(purchase_order_number="PO-9")
    )
    assert item.archive[0]["id"] == first_id
    assert item.archive[0]["purchase_order_number"] == "PO-9"
    assert item.archive[1]["id"] == second_id

    item = remove_archive_record(db_session, "complementary", "CHG-001", first_id)
    assert [r["id"] for r in item.archive] == [second_id]

    item = remove_archive_record(db_session, "complementary", "CHG-001", second_id)
    assert item.archive == []

    with pytest.raises(ItemNotFoundError):
        remove_archive_record(db_session, "complementary", "CHG-001", "missing")


def test_record_command_honours_version(db_session):
    with pytest.raises(ArchiveConflictError):
        append_archive_record(db_session, "component", "BAT-001", _record(), expected_version=7)
    assert len(get_item(db_session, "component", "BAT-001").archive) == 1


def test_repeated_record_id_is_rejected(db_session):
    before = get_item(db_session, "component", "BAT-001").archive

    with pytest.raises(ValueError):
        replace_archive(db_session, "component", "BAT-001", [_record(id="x"), _record("Inactive", id="x")])

    assert get_item(db_session, "component", "BAT-001").archive == before


def test_edit_cannot_duplicate_another_records_id(db_session):
    item = append_archive_record(db_session, "component", "BAT-001", _record("Inactive"))
    first_id, second_id = [r["id"] for r in item.archive]

    item = update_archive_record(db_session, "component", "BAT-001", second_id, _record(id=first_id, notes="edited"))

    assert [r["id"] for r in item.archive] == [first_id, second_id]
    assert item.archive[1]["notes"] == "edited"
