"""Event admin controllers package."""

from .core import EventAdminCoreController
from .participants import EventAdminParticipantsController

EVENT_ADMIN_CONTROLLERS: list[type] = [
    EventAdminCoreController,
    EventAdminParticipantsController,
]

__all__ = [
    "EventAdminCoreController",
    "EventAdminParticipantsController",
    "EVENT_ADMIN_CONTROLLERS",
]
