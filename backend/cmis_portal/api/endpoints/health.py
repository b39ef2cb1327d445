"""
Health Check Endpoints

- /health        - Basic liveness (app is running)
- /health/ready  - Readiness: database reachable, storage and webhook configuration
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from datetime import datetime
from typing import Dict, Any
import time

from sqlalchemy import text

from cmis_portal.core.config import settings
from cmis_portal.core.database import get_session_local
from cmis_portal.core.logging_config import logger
from cmis_portal.services.storage_service import StorageService, get_storage_service


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check database connectivity and that the students table is readable"""
    start = time.time()
    try:
        session_factory = get_session_local()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            try:
                await session.execute(text("SELECT COUNT(*) FROM students"))
                tables_ok = True
            except Exception:
                tables_ok = False

            return {
                "status": "healthy",
                "latency_ms": round((time.time() - start) * 1000, 2),
                "tables_ready": tables_ok,
            }
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "error": str(e) if settings.expose_error_details else "Database unreachable",
        }


def check_storage(storage: StorageService) -> Dict[str, Any]:
    """Configuration only; a live S3 round-trip is too expensive for a probe"""
    return {
        "status": "configured" if storage.is_configured else "not_configured",
        "bucket": storage.bucket_name or None,
        "presign_fallbacks": storage.presign_fallback_count,
    }


@router.get("")
async def liveness():
    return {"status": "healthy", "service": "cmis-student-portal"}


@router.get("/ready")
async def readiness(storage: StorageService = Depends(get_storage_service)):
    """503 until the database answers"""
    database = await check_database()
    checks = {
        "database": database,
        "storage": check_storage(storage),
        "webhook": {"status": "configured" if settings.N8N_WEBHOOK_URL else "not_configured"},
    }
    ready = database["status"] == "healthy"
    body = {
        "status": "ready" if ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "checks": checks,
    }
    return JSONResponse(status_code=200 if ready else 503, content=body)
