from app.models.event import Event
from app.models.interest import EventInterest

__all__ = ["Event", "EventInterest"]
