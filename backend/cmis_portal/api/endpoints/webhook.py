"""
Manual trigger for the automation pipeline (n8n).

POST /webhook/n8n  body {"student_id": <positive int>}
GET  /webhook/n8n?student_id=<positive int>   (for testing)
"""

from fastapi import APIRouter, Depends, Request
from typing import Any, Optional
import json

from cmis_portal.core.exceptions import ValidationError
from cmis_portal.services.webhook_service import AutomationWebhookService, get_webhook_service

router = APIRouter()


def parse_target_student_id(raw: Any) -> int:
    if raw is None or raw == "":
        raise ValidationError("student_id is required", field="student_id")
    if isinstance(raw, bool):
        raise ValidationError("student_id must be a valid positive number", field="student_id")
    try:
        student_id = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError("student_id must be a valid positive number", field="student_id")
    if student_id <= 0:
        raise ValidationError("student_id must be a valid positive number", field="student_id")
    return student_id


async def _trigger(webhook: AutomationWebhookService, raw_student_id: Any) -> dict:
    student_id = parse_target_student_id(raw_student_id)
    reply = await webhook.trigger(student_id)
    return {
        "success": True,
        "message": "n8n pipeline triggered successfully",
        "student_id": student_id,
        "n8n_response": reply,
    }


@router.post("/n8n")
async def trigger_pipeline(
    request: Request,
    webhook: AutomationWebhookService = Depends(get_webhook_service)
):
    body = await request.body()
    try:
        data = json.loads(body) if body else {}
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return await _trigger(webhook, data.get("student_id"))


@router.get("/n8n")
async def trigger_pipeline_get(
    student_id: Optional[str] = None,
    webhook: AutomationWebhookService = Depends(get_webhook_service)
):
    if not student_id:
        raise ValidationError("student_id query parameter is required", field="student_id")
    return await _trigger(webhook, student_id)
