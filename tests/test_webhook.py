import json
from datetime import date

import httpx
from beanie import PydanticObjectId

from app.services.webhook import WebhookService, date_change_payload, work_request_payload


def _service(handler, **kwargs):
    return WebhookService(
        work_request_url="https://hooks.example.org/work-requests",
        date_change_url="https://hooks.example.org/date-changes",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_work_request_payload(work_request_factory):
    request = work_request_factory(requested=date(2026, 3, 12))
    request.id = PydanticObjectId()

    payload = work_request_payload(request, "UPDATE", date(2026, 3, 10))
    assert payload["table_name"] == "work_requests"
    assert payload["id"] == str(request.id)
    assert payload["requested_date"] == "2026-03-12"
    assert payload["old_requested_date"] == "2026-03-10"
    assert payload["status"] == "pending"

    assert work_request_payload(request, "INSERT", date(2026, 3, 10))["old_requested_date"] is None


def test_date_change_payload_defaults_reason(work_request_factory):
    payload = date_change_payload(work_request_factory(), date(2026, 3, 10), date(2026, 3, 12), "  ")
    assert payload["event"] == "work_request_date_changed"
    assert payload["data"]["reason"] == "No reason provided"
    assert payload["data"]["old_date"] == "2026-03-10"
    assert payload["data"]["new_date"] == "2026-03-12"
    assert payload["data"]["requestor_email"] == "jane@church.org"


async def test_notify_date_change_posts_json(work_request_factory):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((str(request.url), json.loads(request.content)))
        return httpx.Response(200, json={"ok": True})

    service = _service(handler)
    delivered = await service.notify_date_change(
        work_request_factory(), date(2026, 3, 10), date(2026, 3, 12), "Boiler repair"
    )
    await service.close()

    assert delivered
    url, body = seen[0]
    assert url == "https://hooks.example.org/date-changes"
    assert body["data"]["reason"] == "Boiler repair"


async def test_failures_are_reported_not_raised(work_request_factory):
    def server_error(request):
        return httpx.Response(500, text="boom")

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    request = work_request_factory()
    request.id = PydanticObjectId()

    assert not await _service(server_error).notify_work_request(request, "INSERT")
    assert not await _service(unreachable).notify_work_request(request, "INSERT")


async def test_disabled_or_unconfigured_skips_call(work_request_factory):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    request = work_request_factory()
    assert not await _service(handler, enabled=False).notify_work_request(request, "INSERT")
    assert not await WebhookService(transport=httpx.MockTransport(handler)).notify_date_change(
        request, date(2026, 3, 10), date(2026, 3, 11), "reason"
    )
    assert calls == []
