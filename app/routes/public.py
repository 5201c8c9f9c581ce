"""Public routes for browsing events and registering interest.

These endpoints need no account: interest is tracked per device, using
the opaque id each client generates for itself.
"""
import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.database import get_session
from app.events.status import EventStatus, enrich_event_with_status, enrich_events_with_status, status_filter
from app.interest.counts import refresh_interested_count
from app.models import Event, EventInterest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["public"])


class InterestRequest(BaseModel):
    device_id: str = ""


def event_payload(event: Event) -> dict[str, Any]:
    """Column values of an event, without relationships."""
    return event.model_dump()


def parse_status(status: str | None) -> EventStatus | None:
    """Parse a ?status= value. Empty or ALL means no filter."""
    if not status or status.upper() == "ALL":
        return None
    try:
        return EventStatus(status.upper())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown status: {status}")


def title_pattern(search: str) -> str:
    """ILIKE pattern matching ``search`` literally anywhere in a title."""
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def add_interest_row(session: Session, event_id: int, device_id: str) -> bool:
    """
    Insert an (event, device) interest row unless it already exists.

    Returns False when the row was already there, including when a concurrent
    request inserted it first and the unique constraint rejected ours.
    """
    existing = session.exec(
        select(EventInterest)
        .where(EventInterest.event_id == event_id)
        .where(EventInterest.device_id == device_id)
    ).first()
    if existing:
        return False

    session.add(EventInterest(event_id=event_id, device_id=device_id))
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        logger.info(f"Interest for event {event_id} already registered by {device_id}")
        return False
    return True


def get_event_or_404(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("/events")
async def list_events(
    status: str | None = None,
    search: str | None = None,
    limit: int = Query(50, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """
    List events with their computed status.

    Optional filters: ``status`` (UPCOMING, ONGOING, COMPLETED, CANCELLED or
    ALL) and ``search`` (case-insensitive match on the title).
    """
    now = datetime.now(UTC)
    wanted = parse_status(status)

    statement = select(Event)
    if wanted is not None:
        statement = statement.where(status_filter(wanted, now))
    if search:
        statement = statement.where(Event.title.ilike(title_pattern(search.strip()), escape="\\"))
    statement = statement.order_by(Event.start_datetime).limit(limit)

    events = session.exec(statement).all()
    enriched = enrich_events_with_status([event_payload(e) for e in events], now)

    return {
        "success": True,
        "count": len(enriched),
        "has_more": len(enriched) == limit,
        "events": enriched,
    }


@router.get("/events/interested")
async def interested_events(
    device_id: str = "",
    limit: int = Query(50, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """
    List the not-yet-finished events a device marked as interesting.

    Must be declared before ``/events/{event_id}`` so "interested" is not
    parsed as an id.
    """
    if not device_id.strip():
        raise HTTPException(status_code=400, detail="device_id is required")

    now = datetime.now(UTC)
    statement = (
        select(Event, EventInterest.created_at)
        .join(EventInterest, EventInterest.event_id == Event.id)
        .where(EventInterest.device_id == device_id)
        .where(func.coalesce(Event.end_datetime, Event.start_datetime) >= now)
        .order_by(Event.start_datetime)
        .limit(limit)
    )
    rows = session.exec(statement).all()

    payloads = [
        {**event_payload(event), "interested_at": interested_at}
        for event, interested_at in rows
    ]
    enriched = enrich_events_with_status(payloads, now)
    return {"success": True, "count": len(enriched), "events": enriched}


@router.get("/events/{event_id}")
async def event_detail(event_id: int, session: Session = Depends(get_session)):
    """Return a single event with its computed status."""
    event = get_event_or_404(session, event_id)
    return {"success": True, "event": enrich_event_with_status(event_payload(event))}


@router.post("/events/{event_id}/interest")
async def add_interest(
    event_id: int,
    body: InterestRequest,
    session: Session = Depends(get_session),
):
    """
    Register a device's interest in an event.

    Registering twice is harmless. Cancelled events refuse new interest
    with a 400. Returns the refreshed interested_count.
    """
    device_id = body.device_id.strip()
    if not device_id:
        raise HTTPException(status_code=400, detail="device_id is required")

    event = get_event_or_404(session, event_id)
    if event.cancelled_at is not None:
        raise HTTPException(status_code=400, detail="This event has been cancelled")

    add_interest_row(session, event_id, device_id)

    count = refresh_interested_count(session, event)
    session.commit()
    logger.info(f"Interest registered for event {event_id} ({count} interested)")

    return {
        "success": True,
        "message": "Interest registered",
        "interested_count": count,
    }


@router.delete("/events/{event_id}/interest")
async def remove_interest(
    event_id: int,
    device_id: str = "",
    session: Session = Depends(get_session),
):
    """
    Withdraw a device's interest in an event.

    ``removed`` tells whether the device actually had a registration.
    """
    device_id = device_id.strip()
    if not device_id:
        raise HTTPException(status_code=400, detail="device_id is required")

    event = get_event_or_404(session, event_id)
    existing = session.exec(
        select(EventInterest)
        .where(EventInterest.event_id == event_id)
        .where(EventInterest.device_id == device_id)
    ).first()
    if existing:
        session.delete(existing)
        session.flush()

    count = refresh_interested_count(session, event)
    session.commit()
    logger.info(f"Interest withdrawn for event {event_id} ({count} interested)")

    return {
        "success": True,
        "message": "Interest removed",
        "interested_count": count,
        "removed": existing is not None,
    }


@router.get("/events/{event_id}/interested-count")
async def interested_count(event_id: int, session: Session = Depends(get_session)):
    event = get_event_or_404(session, event_id)
    return {"success": True, "interested_count": event.interested_count or 0}


@router.get("/events/{event_id}/is-interested")
async def is_interested(
    event_id: int,
    device_id: str = "",
    session: Session = Depends(get_session),
):
    if not device_id.strip():
        raise HTTPException(status_code=400, detail="device_id is required")

    existing = session.exec(
        select(EventInterest)
        .where(EventInterest.event_id == event_id)
        .where(EventInterest.device_id == device_id.strip())
    ).first()
    return {"success": True, "is_interested": existing is not None}
