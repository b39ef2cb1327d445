"""
Unit Tests for the automation webhook forwarder
"""
import json
import pytest
import httpx

from cmis_portal.core.exceptions import UpstreamServiceError, WebhookNotConfiguredError
from cmis_portal.services.webhook_service import AutomationWebhookService


WEBHOOK_URL = "https://n8n.example.com/webhook/student"


def make_service(handler) -> AutomationWebhookService:
    return AutomationWebhookService(url=WEBHOOK_URL, timeout=5, transport=httpx.MockTransport(handler))


class TestTrigger:
    """Manual trigger surfaces failures"""

    @pytest.mark.asyncio
    async def test_posts_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True})

        reply = await make_service(handler).trigger(42)

        assert reply == {"ok": True}
        assert seen["url"] == WEBHOOK_URL
        assert seen["body"]["student_id"] == 42
        assert seen["body"]["source"] == "cmis-student-portal"
        assert seen["body"]["timestamp"].endswith("Z")

    @pytest.mark.asyncio
    async def test_non_json_reply(self):
        reply = await make_service(lambda request: httpx.Response(200, text="Workflow started")).trigger(1)

        assert reply == {"message": "Pipeline triggered successfully"}

    @pytest.mark.asyncio
    async def test_upstream_error_status(self):
        service = make_service(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.trigger(1)

        assert exc_info.value.message == "Failed to trigger n8n pipeline"
        assert exc_info.value.details["upstream_status"] == 500

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamServiceError):
            await make_service(handler).trigger(1)

    @pytest.mark.asyncio
    async def test_not_configured(self):
        with pytest.raises(WebhookNotConfiguredError):
            await AutomationWebhookService(url="").trigger(1)


class TestRegistrationNotice:
    """Registration notifications never fail the caller"""

    @pytest.mark.asyncio
    async def test_notify_swallows_failure(self):
        service = make_service(lambda request: httpx.Response(502))

        assert await service.notify_registration(1) is False

    @pytest.mark.asyncio
    async def test_notify_success(self):
        service = make_service(lambda request: httpx.Response(200, json={}))

        assert await service.notify_registration(1) is True

    @pytest.mark.asyncio
    async def test_schedule_runs_in_background(self):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content)["student_id"])
            return httpx.Response(200, json={})

        task = make_service(handler).schedule_registration_notice(7)
        await task

        assert calls == [7]

    @pytest.mark.asyncio
    async def test_schedule_skipped_when_unconfigured(self):
        assert AutomationWebhookService(url="").schedule_registration_notice(7) is None
