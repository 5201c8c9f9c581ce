"""Cancellation and reactivation rules for events."""
import logging
from datetime import UTC, datetime

from app.events.status import EventStatus, as_utc, resolve_status
from app.models import Event

logger = logging.getLogger(__name__)

MIN_REASON_LENGTH = 10


class LifecycleError(ValueError):
    """Raised when a cancel/reactivate request is not allowed."""


def cancel_event(event: Event, reason: str | None, now: datetime | None = None) -> Event:
    """
    Mark an upcoming event as cancelled.

    Only events that have not started can be cancelled, and a reason of at
    least MIN_REASON_LENGTH characters is required. The event is modified in
    place; the caller commits.
    """
    now = now or datetime.now(UTC)
    reason = (reason or "").strip()

    if len(reason) < MIN_REASON_LENGTH:
        raise LifecycleError(
            f"A cancellation reason of at least {MIN_REASON_LENGTH} characters is required"
        )

    status = resolve_status(event, now)
    if status is EventStatus.CANCELLED:
        raise LifecycleError("Event is already cancelled")
    if status is EventStatus.ONGOING:
        raise LifecycleError("Cannot cancel an ongoing event")
    if status is EventStatus.COMPLETED:
        raise LifecycleError("Cannot cancel a completed event")

    event.cancelled_at = now
    event.cancellation_reason = reason
    logger.info(f"Cancelled event {event.id}: {reason}")
    return event


def reactivate_event(event: Event, now: datetime | None = None) -> Event:
    """
    Clear the cancellation of an event that has not yet finished.

    The event is modified in place; the caller commits.
    """
    now = now or datetime.now(UTC)

    if event.cancelled_at is None:
        raise LifecycleError("Event is not cancelled")

    end = as_utc(event.end_datetime)
    if end is not None and now > end:
        raise LifecycleError("Cannot reactivate an event that has already ended")

    event.cancelled_at = None
    event.cancellation_reason = None
    logger.info(f"Reactivated event {event.id}")
    return event
