"""Event lifecycle status derivation.

An event's status is never stored. It is computed from three fields and the
current instant, with cancellation taking precedence over the time window:

    1. ``cancelled_at`` set              -> CANCELLED
    2. now after ``end_datetime``        -> COMPLETED
    3. start <= now <= end (inclusive)   -> ONGOING
    4. now before ``start_datetime``     -> UPCOMING
    5. anything else                     -> UPCOMING

Rule 5 covers timestamps that are missing or cannot be parsed. The resolver
feeds display code and list endpoints, so it never raises on bad data.
"""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import and_

from app.models import Event


class EventStatus(str, Enum):
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


def as_utc(value: Any) -> datetime | None:
    """Coerce a datetime or ISO-8601 string to an aware UTC datetime.

    Naive values are taken to be UTC (SQLite hands back naive datetimes).
    Returns None for anything that can't be interpreted.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    try:
        return dt.astimezone(UTC)
    except (OverflowError, ValueError):
        # offset pushes the value outside the datetime range
        return None


def compute_event_status(
    cancelled_at: Any,
    start_datetime: Any,
    end_datetime: Any,
    now: Any = None,
) -> EventStatus:
    """Return the lifecycle status of an event at ``now``.

    Args:
        cancelled_at: Cancellation timestamp, or None. Any non-None value
            marks the event cancelled, whatever it contains.
        start_datetime: Event start (datetime or ISO string).
        end_datetime: Event end (datetime or ISO string).
        now: Instant to evaluate at. Defaults to the current UTC time.

    Returns:
        The EventStatus. Malformed timestamps resolve to UPCOMING.
    """
    if cancelled_at is not None:
        return EventStatus.CANCELLED

    current = datetime.now(UTC) if now is None else as_utc(now)
    start = as_utc(start_datetime)
    end = as_utc(end_datetime)

    if current is None:
        return EventStatus.UPCOMING

    if end is not None and current > end:
        return EventStatus.COMPLETED
    if start is not None and end is not None and start <= current <= end:
        return EventStatus.ONGOING
    if start is not None and current < start:
        return EventStatus.UPCOMING

    return EventStatus.UPCOMING


def resolve_status(event: Any, now: Any = None) -> EventStatus:
    """Compute the status of an object exposing the three event fields."""
    return compute_event_status(
        getattr(event, "cancelled_at", None),
        getattr(event, "start_datetime", None),
        getattr(event, "end_datetime", None),
        now,
    )


def enrich_event_with_status(event: Mapping[str, Any], now: Any = None) -> dict[str, Any]:
    """Return a copy of an event mapping with its ``status`` added."""
    status = compute_event_status(
        event.get("cancelled_at"),
        event.get("start_datetime"),
        event.get("end_datetime"),
        now,
    )
    return {**event, "status": status.value}


def enrich_events_with_status(
    events: Iterable[Mapping[str, Any]], now: Any = None
) -> list[dict[str, Any]]:
    """Enrich a list of event mappings, all evaluated at the same instant."""
    if now is None:
        now = datetime.now(UTC)
    return [enrich_event_with_status(event, now) for event in events]


def status_filter(status: EventStatus | str, now: datetime):
    """
    Build a SQL condition selecting events that currently have ``status``.

    Mirrors compute_event_status so that filtering in the database and
    resolving in Python agree. ``now`` must be UTC.
    """
    status = EventStatus(status)

    if status is EventStatus.CANCELLED:
        return Event.cancelled_at.is_not(None)

    not_cancelled = Event.cancelled_at.is_(None)
    if status is EventStatus.UPCOMING:
        return and_(
            not_cancelled,
            Event.start_datetime > now,
            Event.end_datetime >= now,
        )
    if status is EventStatus.ONGOING:
        return and_(
            not_cancelled,
            Event.start_datetime <= now,
            Event.end_datetime >= now,
        )
    return and_(not_cancelled, Event.end_datetime < now)
