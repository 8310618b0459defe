import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from asset_portal.services.aggregate import build_asset_aggregate


ASSET = {
    "id": "SRV-01",
    "name": "Server",
    "purchase_price": 120_000_000,
    "expected_lifespan": 5,
    "depreciation_method": "Straight-Line",
    "purchase_date": "2023-01-01",
    "status": "Active",
}


def test_aggregate_without_children_has_empty_lists():
    aggregate = build_asset_aggregate(ASSET, None, [], date(2024, 1, 1))

    assert aggregate.complementary_items == []
    assert aggregate.component_items == []
    assert aggregate.current_book_value == Decimal("96000000")
    dumped = aggregate.model_dump(mode="json")
    assert dumped["complementary_items"] == []
    assert dumped["current_book_value"] == 96000000.0


def test_children_keep_order_relation_and_archive():
    archive = [
        {"id": "r1", "status": "Active", "purchase_price": 12_000_000, "purchase_date": "2023-01-01"},
        {"id": "r2", "status": "Inactive", "purchase_price": 6_000_000, "purchase_date": "2023-07-01"},
    ]
    complementary = [
        {"complementary_id": "UPS-1", "relation": "power", "name": "UPS", "expected_lifespan": 2, "archive": archive},
        {"complementary_id": "KVM-1", "relation": "console", "name": "KVM", "archive": []},
    ]
    components = [
        {"component_id": "SSD-1", "relation": "storage", "name": "SSD", "expected_lifespan": 1, "archive": archive},
    ]

    aggregate = build_asset_aggregate(ASSET, complementary, components, date(2024, 1, 1))

    assert [c.complementary_id for c in aggregate.complementary_items] == ["UPS-1", "KVM-1"]
    ups, kvm = aggregate.complementary_items
    assert ups.relation == "power"
    assert ups.archive == archive
    assert ups.archive is not archive
    # Valued from the last record: 6,000,000 over 2 years, 6 months elapsed.
    assert ups.current_status == "Inactive"
    assert ups.current_book_value == Decimal("4500000")
    assert kvm.current_status is None
    assert kvm.current_book_value == Decimal("0")

    ssd = aggregate.component_items[0]
    assert ssd.component_id == "SSD-1"
    assert ssd.current_book_value == Decimal("3000000")


def test_component_ignores_declining_settings():
    components = [
        {
            "component_id": "FAN-1",
            "name": "Fan",
            "expected_lifespan": 1,
            "depreciation_method": "Declining Balance",
            "depreciation_rate": 90,
            "archive": [{"status": "Active", "purchase_price": 1_200_000, "purchase_date": "2023-07-01"}],
        }
    ]
    aggregate = build_asset_aggregate(ASSET, [], components, date(2024, 1, 1))
    assert aggregate.component_items[0].current_book_value == Decimal("600000")



def test_partial_rows_do_not_raise():
    aggregate = build_asset_aggregate(
        {"id": "A1", "purchase_price": 100},
        [{"complementary_id": "C1", "archive": []}],
        [{"component_id": "P1"}],
        date(2024, 1, 1),
    )

    assert aggregate.name == ""
    assert aggregate.current_book_value == Decimal("100")
    assert aggregate.complementary_items[0].name == ""
    assert aggregate.complementary_items[0].current_book_value == Decimal("0")
    assert aggregate.component_items[0].archive == []
