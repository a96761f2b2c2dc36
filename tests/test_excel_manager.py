from datetime import date

from filelock import FileLock

from orderdesk.services.excel_manager import ExcelManager

ORDER = {
    "id": "PED-001",
    "table": "5",
    "items": [
        {"name": "Burger", "price_local": 18000, "price_foreign": 4.5, "quantity": 2},
        {"name": "Lemon drink", "price_local": 5000, "price_foreign": 1.333, "quantity": 3},
    ],
    "status": "delivered",
    "priority": "low",
    "arrival_time": "01:15 PM",
}


def test_build_row_derives_totals():
    row = ExcelManager.build_row(ORDER)

    assert row == {
        "Order ID": "PED-001",
        "Table": "5",
        "Items": "Burger (x2)\nLemon drink (x3)",
        "Total Quantity": 5,
        "Total Local": 51000,
        "Total Foreign": 13.0,
        "Order Time": "01:15 PM",
        "Status": "delivered",
    }


def test_build_row_of_empty_order():
    row = ExcelManager.build_row({**ORDER, "items": []})
    assert row["Items"] == ""
    assert row["Total Quantity"] == 0
    assert row["Total Foreign"] == 0


def test_report_path_is_named_after_the_date(excel):
    assert excel.report_path(date(2026, 10, 19)).name == "orders_2026-10-19.xlsx"
    assert excel.report_path("2026-10-19") == excel.report_path(date(2026, 10, 19))


def test_export_writes_one_row_per_order(excel):
    second = {**ORDER, "id": "PED-002", "table": "0", "status": "preparing"}
    result = excel.export_orders([second, ORDER], "2026-10-19")

    assert result["success"] is True
    assert result["rows"] == 2
    assert excel.report_path("2026-10-19").exists()

    rows = excel.read_report("2026-10-19")
    assert [r["Order ID"] for r in rows] == ["PED-002", "PED-001"]
    assert rows[1]["Total Local"] == 51000
    assert list(rows[0].keys()) == ExcelManager.REPORT_COLUMNS


def test_export_of_empty_day_writes_header_only(excel):
    result = excel.export_orders([], "2026-10-19")

    assert result["success"] is True
    assert result["rows"] == 0
    assert excel.report_path("2026-10-19").exists()
    assert excel.read_report("2026-10-19") == []


def test_export_replaces_existing_report(excel):
    excel.export_orders([ORDER], "2026-10-19")
    excel.export_orders([], "2026-10-19")

    assert excel.read_report("2026-10-19") == []
    leftovers = [p.name for p in excel.reports_dir.iterdir() if p.suffix == ".xlsx"]
    assert leftovers == ["orders_2026-10-19.xlsx"]


def test_lock_timeout_is_reported_not_raised(tmp_path):
    manager = ExcelManager(tmp_path / "reports", lock_timeout=0)
    manager.reports_dir.mkdir(parents=True)
    target = manager.report_path("2026-10-19")

    with FileLock(f"{target}.lock"):
        result = manager.export_orders([ORDER], "2026-10-19")

    assert result["success"] is False
    assert "Lock timeout" in result["message"]
    assert not target.exists()


def test_read_missing_report(excel):
    assert excel.read_report("2001-01-01") == []
