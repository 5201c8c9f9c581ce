"""Interest registrations linking anonymous devices to events."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.event import Event


class EventInterest(SQLModel, table=True):
    """A device's "interested" mark on an event.

    Devices are identified only by the opaque id they generate locally, so
    a row proves nothing about who the user is. At most one row exists per
    (event, device) pair.

    Attributes:
        id: Numeric identifier.
        event_id: Foreign key to the Event.
        device_id: Locally generated device identity.
        created_at: When the interest was registered.
        event: Reference to the parent Event object.
    """
    __table_args__ = (UniqueConstraint("event_id", "device_id"),)

    id: int | None = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    device_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Relationship
    event: Optional["Event"] = Relationship(back_populates="interests")
