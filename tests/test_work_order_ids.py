import asyncio

from beanie import PydanticObjectId

from app.services.work_order_ids import (
    display_code,
    format_work_order_id,
    next_work_order_id,
    parse_work_order_number,
)


def test_format_and_parse():
    assert format_work_order_id(7) == "WO-7"
    assert parse_work_order_number("WO-42") == 42
    assert parse_work_order_number(" wo-3 ") == 3
    assert parse_work_order_number("WO-") is None
    assert parse_work_order_number("42") is None
    assert parse_work_order_number(None) is None


def test_display_code_falls_back_to_id(work_request_factory):
    assert display_code(work_request_factory(work_order_id="WO-9")) == "WO-9"

    request = work_request_factory(work_order_id=None)
    request.id = PydanticObjectId("65f1c0ffee0000000000abcd")
    assert display_code(request) == "WO-abcd"


async def test_codes_are_sequential():
    codes = [await next_work_order_id() for _ in range(3)]
    assert codes == ["WO-1", "WO-2", "WO-3"]


async def test_concurrent_codes_are_unique():
    codes = await asyncio.gather(*(next_work_order_id() for _ in range(10)))
    assert len(set(codes)) == 10
