from .event import EVENT_IMAGE_PREFIX, Event, EventQuerySet
from .payment import Payment
from .roster import RosterEntry

__all__ = [
    "EVENT_IMAGE_PREFIX",
    "Event",
    "EventQuerySet",
    "Payment",
    "RosterEntry",
]
