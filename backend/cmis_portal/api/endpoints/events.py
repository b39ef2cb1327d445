from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from cmis_portal.core.database import get_db
from cmis_portal.services.event_service import EventService
from cmis_portal.services.storage_service import StorageService, get_storage_service

router = APIRouter()


@router.get("")
async def list_events(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    upcoming: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    """
    Event catalog, newest date first.

    Query: page (default 1), limit (default 50, max 100), upcoming=true for
    events dated today or later.
    """
    return await EventService(db, storage).list_catalog(page, limit, upcoming)


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
):
    return await EventService(db, storage).get_catalog_entry(event_id)
