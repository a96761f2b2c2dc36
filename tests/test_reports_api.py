import pytest

from tests.helpers import ADMIN, make_item

pytestmark = pytest.mark.asyncio


async def _archive_day(app, client, count: int = 2):
    for _ in range(count):
        await client.post("/order", json={"items": [make_item()]})
    return await app.state.scheduler.run_cycle()


async def test_report_missing_before_first_archive(client):
    response = await client.get("/report")

    assert response.status_code == 404
    assert response.json()["error"] == "REPORT_NOT_FOUND"


async def test_report_download_after_archive(app, client):
    await _archive_day(app, client)

    response = await client.get("/report")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "orders_2026-10-19.xlsx" in response.headers["content-disposition"]
    assert response.content[:2] == b"PK"


async def test_report_for_a_given_day(app, client):
    await _archive_day(app, client)

    assert (await client.get("/report", params={"day": "2026-10-19"})).status_code == 200
    assert (await client.get("/report", params={"day": "2026-10-18"})).status_code == 404
    assert (await client.get("/report", params={"day": "yesterday"})).status_code == 422


async def test_history_requires_admin(client):
    response = await client.get("/history")
    assert response.status_code == 401


async def test_history_lists_archived_orders(app, client, clock):
    await _archive_day(app, client, count=2)
    clock.now = clock.now.replace(day=20)
    await _archive_day(app, client, count=1)

    everything = (await client.get("/history", auth=ADMIN)).json()
    assert [(r["archived_date"], r["id"]) for r in everything] == [
        ("2026-10-19", "PED-002"),
        ("2026-10-19", "PED-001"),
        ("2026-10-20", "PED-001"),
    ]

    one_day = (await client.get("/history", params={"archived_date": "2026-10-20"}, auth=ADMIN)).json()
    assert [r["id"] for r in one_day] == ["PED-001"]


async def test_root(client):
    body = (await client.get("/")).json()
    assert body["health"] == "/health"
    assert body["events"] == "/ws"


async def test_health_reports_state(app, client):
    await client.post("/order", json={"items": [make_item()]})

    body = (await client.get("/health")).json()

    assert body["status"] == "operational"
    assert body["active_orders"] == 1
    assert body["next_order_id"] == "PED-002"
    assert body["viewers"] == 0
    assert body["history_records"] == 0
    assert body["menu_items"] == 0
    assert body["redis"] == "not used"
    assert body["scheduler"]["running"] is False
    assert body["scheduler"]["last_run_at"] is None


async def test_health_after_archive(app, client):
    await _archive_day(app, client, count=2)

    body = (await client.get("/health")).json()

    assert body["active_orders"] == 0
    assert body["history_records"] == 2
    assert body["scheduler"]["last_archived_count"] == 2
    assert body["scheduler"]["last_report_ok"] is True
    assert body["scheduler"]["last_history_persisted"] is True


async def test_health_degraded_when_report_failed(app, client, monkeypatch):
    monkeypatch.setattr(
        app.state.excel,
        "export_orders",
        lambda orders, report_date: {"success": False, "message": "Lock timeout (30s)"},
    )
    await _archive_day(app, client, count=1)

    body = (await client.get("/health")).json()
    assert body["status"] == "degraded"
    assert body["scheduler"]["last_report_ok"] is False
