from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any, Dict
from datetime import date, time

from cmis_portal.models.event import Event
from cmis_portal.utils.field_normalizer import normalize_agenda


class EventResponse(BaseModel):
    """Event as listed in the catalog; isPast/agenda/fileUrl are derived on read"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    description: Optional[str] = None
    event_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location_type: Optional[str] = None
    file_name: Optional[str] = None
    file_key: Optional[str] = None
    file_url: Optional[str] = None
    event_summary: Optional[str] = None
    about_event: Optional[str] = None
    event_agenda: Optional[str] = None
    agenda: List[str] = Field(default_factory=list)
    is_past: bool = False

    @classmethod
    def from_event(cls, event: Event, today: date, file_url: Optional[str] = None) -> "EventResponse":
        return cls(
            id=event.event_id,
            title=event.title,
            description=event.description,
            event_date=event.event_date,
            start_time=event.start_time,
            end_time=event.end_time,
            location_type=event.location_type,
            file_name=event.file_name,
            file_key=event.file_key,
            file_url=file_url,
            event_summary=event.event_summary,
            about_event=event.about_event,
            event_agenda=event.event_agenda,
            agenda=normalize_agenda(event.event_agenda),
            is_past=event.event_date < today,
        )

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
