"""
API Tests for the event catalog
"""
import pytest
from datetime import date, time, timedelta
from httpx import AsyncClient

from cmis_portal.models.event import Event


@pytest.fixture
def event_factory(db_session):
    async def _create(days_from_today: int, **overrides) -> Event:
        values = dict(
            title=f"Event {days_from_today:+d}",
            event_date=date.today() + timedelta(days=days_from_today),
            start_time=time(18, 0),
            end_time=time(19, 30),
            location_type="In-Person",
        )
        values.update(overrides)
        event = Event(**values)
        db_session.add(event)
        await db_session.commit()
        await db_session.refresh(event)
        return event

    return _create


class TestListEvents:
    """GET /api/events"""

    @pytest.mark.asyncio
    async def test_newest_date_first(self, client: AsyncClient, event_factory):
        await event_factory(-3)
        await event_factory(10)
        await event_factory(2)

        response = await client.get("/api/events")

        assert response.status_code == 200
        body = response.json()
        assert [e["title"] for e in body["events"]] == ["Event +10", "Event +2", "Event -3"]
        assert body["pagination"] == {"page": 1, "limit": 50, "total": 3, "totalPages": 1}

    @pytest.mark.asyncio
    async def test_same_day_later_start_first(self, client: AsyncClient, event_factory):
        await event_factory(3, title="Noon", start_time=time(12, 0))
        await event_factory(3, title="Morning", start_time=time(9, 0))
        await event_factory(3, title="Evening", start_time=time(18, 0))
        await event_factory(1, title="Earlier day", start_time=time(20, 0))

        events = (await client.get("/api/events")).json()["events"]

        assert [e["title"] for e in events] == ["Evening", "Noon", "Morning", "Earlier day"]

    @pytest.mark.asyncio
    async def test_is_past_derived(self, client: AsyncClient, event_factory):
        await event_factory(-1)
        await event_factory(0)

        events = (await client.get("/api/events")).json()["events"]

        by_title = {e["title"]: e for e in events}
        assert by_title["Event -1"]["isPast"] is True
        assert by_title["Event +0"]["isPast"] is False

    @pytest.mark.asyncio
    async def test_upcoming_includes_today(self, client: AsyncClient, event_factory):
        await event_factory(-1)
        await event_factory(0)
        await event_factory(5)

        response = await client.get("/api/events", params={"upcoming": "true"})

        body = response.json()
        assert body["pagination"]["total"] == 2
        assert all(not e["isPast"] for e in body["events"])

    @pytest.mark.asyncio
    async def test_upcoming_other_values_ignored(self, client: AsyncClient, event_factory):
        await event_factory(-1)
        await event_factory(5)

        response = await client.get("/api/events", params={"upcoming": "yes"})

        assert response.json()["pagination"]["total"] == 2

    @pytest.mark.asyncio
    async def test_camel_case_and_agenda(self, client: AsyncClient, event_factory):
        await event_factory(1, event_agenda="Welcome\nPanel\nNetworking")

        event = (await client.get("/api/events")).json()["events"][0]

        assert event["eventDate"] == (date.today() + timedelta(days=1)).isoformat()
        assert event["startTime"] == "18:00:00"
        assert event["locationType"] == "In-Person"
        assert event["agenda"] == ["Welcome", "Panel", "Networking"]

    @pytest.mark.asyncio
    async def test_file_url_presigned(self, client: AsyncClient, event_factory):
        await event_factory(1, file_name="flyer.pdf", file_key="events/flyer.pdf")

        event = (await client.get("/api/events")).json()["events"][0]

        assert event["fileUrl"].startswith("https://test-bucket.s3.test/events/flyer.pdf")

    @pytest.mark.asyncio
    async def test_file_url_falls_back_to_name(self, client: AsyncClient, fake_storage, event_factory):
        await event_factory(1, file_name="flyer.pdf", file_key="events/flyer.pdf")
        fake_storage.fail_presign = True

        response = await client.get("/api/events")

        assert response.status_code == 200
        assert response.json()["events"][0]["fileUrl"] == "flyer.pdf"

    @pytest.mark.asyncio
    async def test_limit_capped(self, client: AsyncClient):
        response = await client.get("/api/events", params={"limit": 1000})

        assert response.json()["pagination"]["limit"] == 100


class TestGetEvent:
    """GET /api/events/{id}"""

    @pytest.mark.asyncio
    async def test_get_event(self, client: AsyncClient, event_factory):
        event = await event_factory(3, description="Career night")

        response = await client.get(f"/api/events/{event.event_id}")

        assert response.status_code == 200
        assert response.json()["event"]["description"] == "Career night"

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient):
        response = await client.get("/api/events/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Event not found"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw_id", ["abc", "0", "-4"])
    async def test_invalid_id(self, client: AsyncClient, raw_id):
        response = await client.get(f"/api/events/{raw_id}")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid event ID. Must be a positive number."}
