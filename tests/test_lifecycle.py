import pytest

from orderdesk.core.exceptions import InvalidOrderShape, OrderNotFound
from orderdesk.schemas import OrderSubmission, PriorityEnum
from orderdesk.services.lifecycle import compute_priority
from orderdesk.services.validator import validate_order_items

from tests.helpers import make_item

pytestmark = pytest.mark.asyncio


async def test_submit_derives_identity_and_fields(lifecycle, store):
    order = await lifecycle.submit(OrderSubmission(items=[make_item()]))

    assert order.id == "PED-001"
    assert order.status == "preparing"
    assert order.priority == PriorityEnum.HIGH
    assert order.arrival_time == "02:05 PM"
    assert order.table == "0"
    assert store.next_sequence == 2


async def test_submit_accepts_plain_mapping(lifecycle):
    order = await lifecycle.submit({"items": [make_item()], "table": 7})
    assert order.table == "7"


@pytest.mark.parametrize("table", [None, "", 0])
async def test_missing_table_defaults_to_zero(lifecycle, table):
    order = await lifecycle.submit({"items": [make_item()], "table": table})
    assert order.table == "0"


@pytest.mark.parametrize(
    "names, expected",
    [
        (["Burger"], PriorityEnum.HIGH),
        (["Burger", "Soft DRINK"], PriorityEnum.LOW),
        (["Drink - Cola"], PriorityEnum.LOW),
        (["Drinking chocolate"], PriorityEnum.LOW),
        (["Cola"], PriorityEnum.HIGH),
    ],
)
async def test_priority_is_low_when_any_item_is_a_drink(lifecycle, names, expected):
    order = await lifecycle.submit({"items": [make_item(n) for n in names]})
    assert order.priority == expected


async def test_compute_priority_of_empty_order_is_high():
    assert compute_priority(validate_order_items([])) == PriorityEnum.HIGH


async def test_ids_increment_within_a_day(lifecycle):
    ids = [(await lifecycle.submit({"items": [make_item()]})).id for _ in range(3)]
    assert ids == ["PED-001", "PED-002", "PED-003"]


async def test_empty_items_list_is_accepted(lifecycle, store):
    order = await lifecycle.submit({"items": []})
    assert order.items == []
    assert len(store) == 1


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"items": "Burger"},
        {"items": {"name": "Burger"}},
        {"items": [{k: v for k, v in make_item().items() if k != "quantity"}]},
        {"items": [make_item()], "table": ["A", "B"]},
    ],
)
async def test_invalid_submission_changes_nothing(lifecycle, store, viewer, body):
    await lifecycle.submit({"items": [make_item()]})
    viewer.messages.clear()

    with pytest.raises(InvalidOrderShape):
        await lifecycle.submit(body)

    assert len(store) == 1
    assert store.next_order_id == "PED-002"
    assert viewer.messages == []


async def test_submit_broadcasts_full_order(lifecycle, viewer):
    order = await lifecycle.submit({"items": [make_item(notes="well done")], "table": "4"})

    assert viewer.events == ["order-created"]
    data = viewer.messages[0]["data"]
    assert data["id"] == order.id
    assert data["table"] == "4"
    assert data["priority"] == "high"
    assert data["items"][0]["notes"] == "well done"


async def test_list_active_is_newest_first(lifecycle):
    for _ in range(3):
        await lifecycle.submit({"items": [make_item()]})

    assert [o.id for o in lifecycle.list_active()] == ["PED-003", "PED-002", "PED-001"]


async def test_update_status_changes_only_that_status(lifecycle, viewer):
    first = await lifecycle.submit({"items": [make_item()], "table": "1"})
    second = await lifecycle.submit({"items": [make_item("Soda drink")], "table": "2"})
    before_first = first.model_dump()
    before_second = second.model_dump()

    updated = await lifecycle.update_status(first.id, "ready")

    assert updated.status == "ready"
    assert {**before_first, "status": "ready"} == updated.model_dump()
    assert lifecycle.store.get(second.id).model_dump() == before_second
    assert viewer.messages[-1] == {"event": "order-status-changed", "data": {"id": first.id, "status": "ready"}}


async def test_update_status_accepts_free_form_status(lifecycle):
    order = await lifecycle.submit({"items": [make_item()]})
    updated = await lifecycle.update_status(order.id, "waiting for dessert")
    assert updated.status == "waiting for dessert"


async def test_update_unknown_order(lifecycle, store, viewer):
    await lifecycle.submit({"items": [make_item()]})
    snapshot = [o.model_dump() for o in store.list_orders()]
    viewer.messages.clear()

    with pytest.raises(OrderNotFound):
        await lifecycle.update_status("PED-404", "ready")

    assert [o.model_dump() for o in store.list_orders()] == snapshot
    assert viewer.messages == []
