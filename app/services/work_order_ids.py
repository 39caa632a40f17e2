"""
Work order codes
Sequential human-readable identifiers (WO-1, WO-2, ...)
"""
import re
from typing import Optional

from pymongo import ReturnDocument

from app.models.counter import Counter
from app.models.work_request import WorkRequest


WORK_ORDER_PREFIX = "WO-"
SEQUENCE_NAME = "work_order_id"

_CODE_PATTERN = re.compile(r"^WO-(\d+)$")


def format_work_order_id(number: int) -> str:
    return f"{WORK_ORDER_PREFIX}{number}"


def parse_work_order_number(code: Optional[str]) -> Optional[int]:
    """WO-12 -> 12; None for anything else"""
    if not code:
        return None
    match = _CODE_PATTERN.match(code.strip().upper())
    return int(match.group(1)) if match else None


def display_code(request: WorkRequest) -> str:
    """Work order code, falling back to the tail of the document id"""
    if request.work_order_id:
        return request.work_order_id
    return f"{WORK_ORDER_PREFIX}{str(request.id)[-4:]}"


async def next_work_order_id() -> str:
    """Atomically reserve the next work order code"""
    collection = Counter.get_motor_collection()
    counter = await collection.find_one_and_update(
        {"name": SEQUENCE_NAME},
        {"$inc": {"value": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return format_work_order_id(counter["value"])
