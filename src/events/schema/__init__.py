"""Events schema package.

All schemas are re-exported here so callers can import from ``events.schema``.
"""

from .checkout import CheckoutRequestSchema, CheckoutSessionSchema
from .event import (
    EventCreateSchema,
    EventDetailSchema,
    EventInListSchema,
    EventUpdateSchema,
)
from .media import (
    EventImagesSchema,
    PresignedDownloadSchema,
    PresignedUploadRequestSchema,
    PresignedUploadSchema,
)
from .roster import (
    ContactEmailsSchema,
    EligibilityErrorSchema,
    JoinRequestSchema,
    ParticipantRemoveSchema,
    RegisteredEventSchema,
    RosterEntrySchema,
)
from .waiver import (
    CompletedWaiverSchema,
    WaiverSignSchema,
    WaiverTemplateCreateSchema,
    WaiverTemplateSchema,
)

__all__ = [
    "CheckoutRequestSchema",
    "CheckoutSessionSchema",
    "CompletedWaiverSchema",
    "ContactEmailsSchema",
    "EligibilityErrorSchema",
    "EventCreateSchema",
    "EventDetailSchema",
    "EventImagesSchema",
    "EventInListSchema",
    "EventUpdateSchema",
    "JoinRequestSchema",
    "ParticipantRemoveSchema",
    "PresignedDownloadSchema",
    "PresignedUploadRequestSchema",
    "PresignedUploadSchema",
    "RegisteredEventSchema",
    "RosterEntrySchema",
    "WaiverSignSchema",
    "WaiverTemplateCreateSchema",
    "WaiverTemplateSchema",
]
