"""
Event Catalog Access - read-only listing and lookup over the events table
"""

import time
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from cmis_portal.core.exceptions import EventNotFoundError, ValidationError
from cmis_portal.core.logging_config import logger
from cmis_portal.models.event import Event
from cmis_portal.schemas.event import EventResponse
from cmis_portal.services.storage_service import StorageService
from cmis_portal.utils.pagination import PaginationParams, parse_pagination, build_pagination


DEFAULT_EVENT_PAGE_SIZE = 50
MAX_EVENT_PAGE_SIZE = 100


def parse_event_id(raw: Any) -> int:
    """Positive integer id, else 400"""
    try:
        event_id = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid event ID. Must be a positive number.", field="id")
    if event_id <= 0:
        raise ValidationError("Invalid event ID. Must be a positive number.", field="id")
    return event_id


def parse_upcoming(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return isinstance(raw, str) and raw.strip().lower() == "true"


class EventService:
    """Event catalog"""

    def __init__(self, db: AsyncSession, storage: StorageService):
        self.db = db
        self.storage = storage

    async def list_events(
        self,
        params: PaginationParams,
        upcoming_only: bool = False,
        today: Optional[date] = None
    ) -> Tuple[List[Event], int]:
        """Rows for one page plus the total count, newest date first"""
        today = today or date.today()
        base = select(Event)
        count_stmt = select(func.count(Event.event_id))
        if upcoming_only:
            base = base.where(Event.event_date >= today)
            count_stmt = count_stmt.where(Event.event_date >= today)

        start = time.perf_counter()
        total = (await self.db.execute(count_stmt)).scalar() or 0
        result = await self.db.execute(
            base.order_by(Event.event_date.desc(), Event.start_time.desc())
            .offset(params.offset)
            .limit(params.limit)
        )
        rows = list(result.scalars().all())
        logger.log_db_query("SELECT", "events", (time.perf_counter() - start) * 1000, len(rows))
        return rows, total

    async def get_event(self, event_id: Any) -> Event:
        event_id = parse_event_id(event_id)
        result = await self.db.execute(select(Event).where(Event.event_id == event_id))
        event = result.scalar_one_or_none()
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def _to_response(self, event: Event, today: date) -> Dict[str, Any]:
        # A preview problem falls back to the file name and never fails the request
        file_url = None
        if event.file_key:
            file_url = await self.storage.presign_or_fallback(event.file_key, fallback=event.file_name)
        return EventResponse.from_event(event, today, file_url).to_json()

    async def list_catalog(self, page: Any = None, limit: Any = None, upcoming: Any = None) -> Dict[str, Any]:
        """GET /events payload"""
        params = parse_pagination(
            page, limit,
            default_limit=DEFAULT_EVENT_PAGE_SIZE,
            max_limit=MAX_EVENT_PAGE_SIZE,
        )
        today = date.today()
        rows, total = await self.list_events(params, parse_upcoming(upcoming), today)
        events = [await self._to_response(row, today) for row in rows]
        return {
            "success": True,
            "events": events,
            "pagination": build_pagination(params.page, params.limit, total),
        }

    async def get_catalog_entry(self, event_id: Any) -> Dict[str, Any]:
        """GET /events/{id} payload"""
        event = await self.get_event(event_id)
        return {"success": True, "event": await self._to_response(event, date.today())}
