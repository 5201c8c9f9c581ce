"""Event model for church events shown on the public map.

This module defines the Event model. An event's lifecycle status is never
stored: it is derived from ``cancelled_at`` and the time window each time
it is read (see ``app.events.status``). The ``interested_count`` column is
a denormalised copy of the number of EventInterest rows, refreshed by the
interest endpoints and by the background reconcile job.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.interest import EventInterest


class Event(SQLModel, table=True):
    """A church event.

    Attributes:
        id: Numeric identifier.
        title: Display title.
        start_datetime: When the event starts.
        end_datetime: When the event ends. Expected to be strictly after
            ``start_datetime``; this is validated when events are authored,
            not here.
        cancelled_at: Set when the organiser cancels the event. Presence
            alone marks the event as cancelled.
        cancellation_reason: Free text given when cancelling.
        interested_count: Number of devices that registered interest.
        created_at: Row creation time.
        interests: Interest registrations for this event.
    """
    id: int | None = Field(default=None, primary_key=True)
    title: str
    start_datetime: datetime = Field(index=True)
    end_datetime: datetime
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    interested_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationships
    interests: list["EventInterest"] = Relationship(back_populates="event")
