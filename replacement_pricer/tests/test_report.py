import json

from replacement_pricer.inventory import PRICER_ERROR, PRICER_FOUND, PRICER_MANUAL
from replacement_pricer.report import (
    CANCELLED,
    ERROR,
    FOUND,
    NOT_FOUND,
    SKIPPED,
    ItemReport,
    build_report,
)


def _items():
    return [
        ItemReport("1", "Tower Fan", 130.0, FOUND, price=128.99, source="amazon.com",
                   url="https://www.amazon.com/dp/B01", category="HSW", subcategory="Fans /HSW",
                   within_range=True, raw={"Item #": "1", "Desc": "Tower Fan"}),
        ItemReport("2", "Mail Box", 100.0, FOUND, price=140.0, source="walmart.com", within_range=False),
        ItemReport("3", "Dehumidifier", None, NOT_FOUND, message="No suitable matches found"),
        ItemReport("4", None, None, SKIPPED, message="bulk or generic item"),
        ItemReport("5", "Window AC", None, ERROR, message="KeyError: 'x'"),
        ItemReport("6", "Toilet Brush", None, CANCELLED, message="batch cancelled"),
    ]


def test_counts_and_success_rate():
    report = build_report(_items(), cache_hits=3, elapsed_s=1.23456)
    assert report.total == 6
    assert (report.found, report.not_found, report.skipped, report.errors, report.cancelled) == (2, 1, 1, 1, 1)
    assert report.within_range == 1
    assert report.cache_hits == 3
    assert report.elapsed_s == 1.235
    assert report.success_rate == 50.0


def test_empty_run():
    report = build_report([])
    assert report.success_rate == 0.0
    assert "Total: 0" in report.summary_text()


def test_output_row_columns():
    found, _, missing, skipped, error, _ = _items()

    row = found.output_row()
    assert row["Desc"] == "Tower Fan"
    assert row["Price"] == "128.99"
    assert row["Sub Cat"] == "Fans /HSW"
    assert row["Pricer"] == PRICER_FOUND
    assert row["Status"] == FOUND

    assert missing.output_row()["Price"] == ""
    assert missing.output_row()["Status"] == "No suitable matches found"
    assert missing.pricer == PRICER_MANUAL
    assert skipped.pricer == PRICER_MANUAL
    assert error.pricer == PRICER_ERROR


def test_write_json_drops_raw(tmp_path):
    path = build_report(_items()).write_json(str(tmp_path / "artifacts" / "run.json"))
    data = json.loads(open(path, encoding="utf-8").read())
    assert data["total"] == 6
    assert "raw" not in data["items"][0]
    assert data["items"][0]["price"] == 128.99
