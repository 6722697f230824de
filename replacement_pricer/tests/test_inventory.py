import csv

import pytest

from replacement_pricer.inventory import (
    OUTPUT_COLUMNS,
    build_query,
    detect_columns,
    parse_amount,
    read_inventory,
    write_inventory,
)

HEADERS = ["Item #", "Desc", "Item Description", "Brand", "Model", "Cost to Replace", "Tolerance"]


def _write(path, rows, headers=HEADERS):
    with open(path, "w", newline="", encoding="utf-8") as fh:
        w = csv.DictWriter(fh, fieldnames=headers)
        w.writeheader()
        for r in rows:
            w.writerow(r)
    return path


def test_detect_columns_case_insensitive():
    cols = detect_columns(["item #", "DESC", "Item Description", "Manufacturer", "Model #", "Cost To Replace"])
    assert cols.item_number == "item #"
    assert cols.desc == "DESC"
    assert cols.item_description == "Item Description"
    assert cols.brand == "Manufacturer"
    assert cols.model == "Model #"
    assert cols.cost_to_replace == "Cost To Replace"
    assert cols.tolerance is None


def test_parse_amount():
    assert parse_amount("$1,299.00") == 1299.0
    assert parse_amount(" 15% ") == 15.0
    assert parse_amount("") is None
    assert parse_amount("0") is None
    assert parse_amount("n/a") is None


def test_build_query_prefers_long_desc():
    cols = detect_columns(HEADERS)
    row = {"Desc": "Honeywell QuietSet Tower Fan", "Item Description": "Fan", "Brand": "Honeywell"}
    assert build_query(row, cols) == "Honeywell QuietSet Tower Fan"


def test_build_query_composes_from_parts():
    cols = detect_columns(HEADERS)
    row = {"Desc": "1", "Item Description": "Mail Box", "Brand": "Gibraltar", "Model": "ELEGANT"}
    assert build_query(row, cols) == "Gibraltar Mail Box ELEGANT"

    garbled = {"Desc": "Tower fan ��� large", "Item Description": "Tower Fan", "Brand": ""}
    assert build_query(garbled, cols) == "Tower Fan"


def test_build_query_needs_item_description():
    cols = detect_columns(HEADERS)
    assert build_query({"Desc": "short", "Brand": "Acme"}, cols) is None


def test_read_inventory(tmp_path):
    path = _write(tmp_path / "inv.csv", [
        {"Item #": "1", "Desc": "Honeywell QuietSet Tower Fan", "Cost to Replace": "$129.99", "Tolerance": "15"},
        {"Item #": "2", "Item Description": "Misc kitchen items"},
        {"Item #": "3", "Desc": ""},
        {"Item #": "", "Desc": "Orphan line without a number"},
        {"Item #": "4", "Desc": "1", "Item Description": "Mail Box", "Brand": "Gibraltar"},
    ])

    rows, headers = read_inventory(path)

    assert headers == HEADERS
    assert [r.item_number for r in rows] == ["1", "2", "3", "4"]

    fan, misc, blank, mailbox = rows
    assert fan.query == "Honeywell QuietSet Tower Fan"
    assert fan.target_price == 129.99
    assert fan.tolerance == 15.0
    assert fan.skip_reason is None

    assert misc.skip_reason == "bulk or generic item"
    assert misc.query is None
    assert blank.skip_reason == "no usable description"

    assert mailbox.query == "Gibraltar Mail Box"
    assert mailbox.target_price is None
    assert mailbox.raw["Brand"] == "Gibraltar"


def test_read_inventory_requires_item_column(tmp_path):
    path = _write(tmp_path / "bad.csv", [{"Desc": "Tower fan"}], headers=["Desc"])
    with pytest.raises(RuntimeError):
        read_inventory(path)


def test_write_inventory_appends_output_columns(tmp_path):
    out = write_inventory(
        tmp_path / "out" / "priced.csv",
        ["Item #", "Desc"],
        [{"Item #": "1", "Desc": "Fan", "Price": "59.99", "Status": "FOUND", "unrelated": "x"}],
    )
    with open(out, newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        assert reader.fieldnames == ["Item #", "Desc"] + OUTPUT_COLUMNS
        (row,) = list(reader)
    assert row["Price"] == "59.99"
    assert row["URL"] == ""
