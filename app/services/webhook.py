"""
Webhook notifications
Posts work order changes to the workflow-automation endpoint that sends
confirmation and notification emails
"""
import logging
from datetime import datetime, date
from typing import Any, Dict, Optional

import httpx

from app.config import settings
from app.models.work_request import WorkRequest


logger = logging.getLogger(__name__)


def _iso(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def work_request_payload(
    request: WorkRequest,
    operation: str,
    old_requested_date: Optional[date] = None,
) -> Dict[str, Any]:
    """Full row as JSON, plus what changed"""
    return {
        "operation": operation,
        "id": str(request.id),
        "work_order_id": request.work_order_id,
        "title": request.title,
        "description": request.description,
        "department": request.department,
        "requestor_name": request.requestor_name,
        "requestor_email": request.requestor_email,
        "requestor_phone": request.requestor_phone,
        "priority": request.priority.value,
        "requested_date": request.requested_day.isoformat(),
        "location": request.location,
        "category": request.category,
        "estimated_hours": request.estimated_hours,
        "status": request.status.value,
        "date_changed_reason": request.date_changed_reason,
        "approval_checklist": [item.model_dump() for item in request.approval_checklist],
        "rejected_reason": request.rejected_reason,
        "actual_hours": request.actual_hours,
        "completion_notes": request.completion_notes,
        "created_at": _iso(request.created_at),
        "updated_at": _iso(request.updated_at),
        "old_requested_date": _iso(old_requested_date) if operation == "UPDATE" else None,
        "table_name": "work_requests",
    }


def date_change_payload(
    request: WorkRequest,
    old_date: date,
    new_date: date,
    reason: Optional[str],
) -> Dict[str, Any]:
    now = datetime.utcnow().isoformat()
    return {
        "event": "work_request_date_changed",
        "timestamp": now,
        "data": {
            "work_order_id": request.work_order_id,
            "title": request.title,
            "old_date": old_date.isoformat(),
            "new_date": new_date.isoformat(),
            "reason": (reason or "").strip() or "No reason provided",
            "department": request.department,
            "requestor_name": request.requestor_name,
            "requestor_email": request.requestor_email,
            "changed_at": now,
        },
    }


class WebhookService:
    """Service for outbound workflow-automation webhooks"""

    def __init__(
        self,
        work_request_url: Optional[str] = None,
        date_change_url: Optional[str] = None,
        enabled: bool = True,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.work_request_url = work_request_url
        self.date_change_url = date_change_url
        self.enabled = enabled
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def post(self, url: Optional[str], payload: Dict[str, Any]) -> bool:
        """POST a JSON payload; failures are logged, never raised"""
        if not self.enabled or not url:
            logger.debug("Webhook skipped (disabled or no URL configured)")
            return False

        try:
            response = await self._get_client().post(url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Webhook call to %s failed: %s", url, e)
            return False

        if response.is_success:
            logger.info("Webhook delivered to %s (%s)", url, response.status_code)
            return True

        logger.error(
            "Webhook call to %s failed with status %s: %s",
            url, response.status_code, response.text[:500]
        )
        return False

    async def notify_work_request(
        self,
        request: WorkRequest,
        operation: str,
        old_requested_date: Optional[date] = None,
    ) -> bool:
        """Row-change notification, sent after every insert and update"""
        payload = work_request_payload(request, operation, old_requested_date)
        return await self.post(self.work_request_url, payload)

    async def notify_date_change(
        self,
        request: WorkRequest,
        old_date: date,
        new_date: date,
        reason: Optional[str],
    ) -> bool:
        """Tell the requestor their work order was moved"""
        payload = date_change_payload(request, old_date, new_date, reason)
        return await self.post(self.date_change_url, payload)


# Global instance
webhook_service = WebhookService(
    work_request_url=settings.WORK_REQUEST_WEBHOOK_URL,
    date_change_url=settings.DATE_CHANGE_WEBHOOK_URL,
    enabled=settings.WEBHOOK_ENABLED,
    timeout=settings.WEBHOOK_TIMEOUT_SECONDS,
)
