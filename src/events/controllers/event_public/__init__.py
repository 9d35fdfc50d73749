from .details import EventPublicDetailsController
from .discovery import EventPublicDiscoveryController
from .registration import EventPublicRegistrationController

# Controllers in order to preserve path resolution.
# Non-event_id routes (discovery) MUST come first to avoid being matched
# by the /{uuid:event_id} pattern in other controllers.
EVENT_PUBLIC_CONTROLLERS: list[type] = [
    EventPublicDiscoveryController,  # /, /mine
    EventPublicDetailsController,  # /{uuid:event_id}, my-status, waivers
    EventPublicRegistrationController,  # join, checkout, unregister, sign
]

__all__ = [
    "EventPublicDiscoveryController",
    "EventPublicDetailsController",
    "EventPublicRegistrationController",
    "EVENT_PUBLIC_CONTROLLERS",
]
