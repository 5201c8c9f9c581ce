"""Keep Event.interested_count in line with the EventInterest table."""
import logging

from sqlalchemy import func
from sqlmodel import Session, select

from app.models import Event, EventInterest

logger = logging.getLogger(__name__)


def count_interests(session: Session, event_id: int) -> int:
    statement = select(func.count()).select_from(EventInterest).where(
        EventInterest.event_id == event_id
    )
    return session.exec(statement).one()


def refresh_interested_count(session: Session, event: Event) -> int:
    """Recompute one event's counter from its interest rows. Caller commits."""
    event.interested_count = count_interests(session, event.id)
    session.add(event)
    return event.interested_count


def reconcile_interest_counts(session: Session) -> dict:
    """
    Recompute every event's counter and fix the ones that drifted.

    Returns dict with keys: checked, updated
    """
    statement = (
        select(EventInterest.event_id, func.count())
        .group_by(EventInterest.event_id)
    )
    actual = {event_id: count for event_id, count in session.exec(statement).all()}

    stats = {"checked": 0, "updated": 0}
    for event in session.exec(select(Event)).all():
        stats["checked"] += 1
        expected = actual.get(event.id, 0)
        if event.interested_count != expected:
            logger.info(
                f"Fixing interested_count for event {event.id}: "
                f"{event.interested_count} -> {expected}"
            )
            event.interested_count = expected
            session.add(event)
            stats["updated"] += 1

    session.commit()
    return stats
