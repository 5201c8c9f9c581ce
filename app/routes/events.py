"""Event routes for cancelling and reactivating events."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from app.core.database import get_session
from app.events.lifecycle import LifecycleError, cancel_event, reactivate_event
from app.events.status import enrich_event_with_status
from app.models import Event

router = APIRouter(prefix="/events", tags=["events"])


class CancelRequest(BaseModel):
    cancellation_reason: str = ""


@router.post("/{event_id}/cancel")
async def cancel(
    event_id: int,
    body: CancelRequest,
    session: Session = Depends(get_session),
):
    """
    Cancel an upcoming event.

    Requires a reason of at least 10 characters. Returns 400 if the event
    is already cancelled, in progress or finished.
    """
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    try:
        cancel_event(event, body.cancellation_reason)
    except LifecycleError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session.add(event)
    session.commit()
    session.refresh(event)

    return {
        "message": "Event cancelled",
        "cancellation_reason": event.cancellation_reason,
        "event": enrich_event_with_status(event.model_dump()),
    }


@router.post("/{event_id}/reactivate")
async def reactivate(event_id: int, session: Session = Depends(get_session)):
    """
    Reactivate a cancelled event.

    Returns 400 if the event is not cancelled or has already ended.
    """
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    try:
        reactivate_event(event)
    except LifecycleError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session.add(event)
    session.commit()
    session.refresh(event)

    return {
        "message": "Event reactivated",
        "event": enrich_event_with_status(event.model_dump()),
    }
