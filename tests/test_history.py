import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from asset_portal.services.history import (
    UNKNOWN_PO,
    current_record,
    group_by_purchase_order,
    purchase_order_key,
)


def test_groups_by_po_with_sentinel_for_blank():
    r0 = {"purchase_order_number": "PO-1", "status": "Active"}
    r1 = {"purchase_order_number": "PO-1", "status": "Inactive"}
    r2 = {"purchase_order_number": "", "status": "Active"}

    grouped = group_by_purchase_order([r0, r1, r2])

    assert grouped == {"PO-1": [r0, r1], UNKNOWN_PO: [r2]}
    assert grouped["PO-1"][0] is r0


def test_empty_input_gives_empty_mapping():
    assert group_by_purchase_order([]) == {}
    assert group_by_purchase_order(None) == {}


def test_missing_blank_and_null_po_share_one_group():
    records = [
        {"purchase_order_number": None},
        {"status": "Active"},
        {"purchase_order_number": "   "},
        {"purchase_order_number": "PO-9"},
    ]
    grouped = group_by_purchase_order(records)
    assert list(grouped) == [UNKNOWN_PO, "PO-9"]
    assert len(grouped[UNKNOWN_PO]) == 3


def test_every_record_lands_exactly_once():
    records = [{"purchase_order_number": po, "n": n} for n, po in enumerate(["A", "B", "", "A", "C", None, "B"])]
    grouped = group_by_purchase_order(records)
    flattened = [record for group in grouped.values() for record in group]
    assert sorted(r["n"] for r in flattened) == list(range(len(records)))
    assert list(grouped) == ["A", "B", UNKNOWN_PO, "C"]
    assert [r["n"] for r in grouped["A"]] == [0, 3]


def test_po_key_strips_whitespace():
    assert purchase_order_key({"purchase_order_number": " PO-7 "}) == "PO-7"


def test_current_record_is_last():
    assert current_record([]) is None
    assert current_record([{"n": 1}, {"n": 2}]) == {"n": 2}
