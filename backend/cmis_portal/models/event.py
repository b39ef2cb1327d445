from sqlalchemy import Column, String, Integer, Text, Date, Time

from cmis_portal.core.database import Base


class Event(Base):
    """Published event. The application only reads these rows."""
    __tablename__ = "events"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    location_type = Column(String(50), nullable=True)

    # Attached file (flyer/slides)
    file_name = Column(String(255), nullable=True)
    file_key = Column(String(500), nullable=True)

    event_summary = Column(Text, nullable=True)
    about_event = Column(Text, nullable=True)
    event_agenda = Column(Text, nullable=True)  # JSON list text or newline-delimited text

    def __repr__(self):
        return f"<Event {self.event_id} {self.title}>"
