"""
Automation webhook forwarder (n8n)

Forwards a student id to the configured automation pipeline. Registration uses
the best-effort ``notify_registration``; the manual endpoint uses ``trigger``
and surfaces failures.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Set

import httpx

from cmis_portal.core.config import settings
from cmis_portal.core.exceptions import (
    PortalError,
    UpstreamServiceError,
    WebhookNotConfiguredError,
)
from cmis_portal.core.logging_config import logger


# Strong references so fire-and-forget notifications are not garbage collected mid-flight
_background_tasks: Set[asyncio.Task] = set()


class AutomationWebhookService:
    """POSTs {student_id, timestamp, source} to the automation webhook"""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url if url is not None else settings.N8N_WEBHOOK_URL
        self.timeout = timeout if timeout is not None else settings.WEBHOOK_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    def _payload(self, student_id: int) -> Dict[str, Any]:
        return {
            "student_id": student_id,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "source": settings.WEBHOOK_SOURCE,
        }

    async def trigger(self, student_id: int) -> Dict[str, Any]:
        """
        Forward one student id.

        Returns:
            The webhook's JSON reply, or a default message when the reply is not JSON

        Raises:
            WebhookNotConfiguredError: no webhook URL (500)
            UpstreamServiceError: non-2xx reply or transport failure (502)
        """
        if not self.url:
            logger.error("N8N_WEBHOOK_URL is not configured")
            raise WebhookNotConfiguredError()

        logger.info(f"Triggering automation webhook for student_id: {student_id}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=self._payload(student_id))
        except httpx.HTTPError as e:
            logger.error(
                f"Automation webhook unreachable: {type(e).__name__}: {e}",
                extra={"event_type": "webhook_error", "student_id_target": student_id}
            )
            raise UpstreamServiceError("Failed to trigger n8n pipeline") from e

        if not response.is_success:
            logger.error(
                f"Automation webhook returned {response.status_code}: {response.text[:500]}",
                extra={
                    "event_type": "webhook_error",
                    "upstream_status": response.status_code,
                    "student_id_target": student_id,
                }
            )
            raise UpstreamServiceError(
                "Failed to trigger n8n pipeline",
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            # n8n may answer with an empty body or plain text
            data = {"message": "Pipeline triggered successfully"}

        logger.info(f"Automation webhook triggered for student_id: {student_id}")
        return data

    async def notify_registration(self, student_id: int) -> bool:
        """Best-effort: failures are logged, never raised"""
        if not self.url:
            logger.debug("Automation webhook not configured; skipping registration notification")
            return False
        try:
            await self.trigger(student_id)
            return True
        except PortalError as e:
            logger.warning(
                f"Registration notification failed for student {student_id}: {e.message}",
                extra={"event_type": "webhook_notify_failed", "student_id_target": student_id}
            )
            return False

    def schedule_registration_notice(self, student_id: int) -> Optional[asyncio.Task]:
        """Fire-and-forget notify_registration on the running loop"""
        if not self.url:
            return None
        task = asyncio.create_task(self.notify_registration(student_id))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return task


webhook_service = AutomationWebhookService()


def get_webhook_service() -> AutomationWebhookService:
    """FastAPI dependency (overridden in tests)"""
    return webhook_service
