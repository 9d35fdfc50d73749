"""Registration eligibility and roster management package.

This package provides the eligibility gates and the RegistrationManager that
owns every write to an event's roster.
"""

from .enums import NextStep, Reasons, RegistrationStatus
from .types import (
    AlreadyRegisteredError,
    CapacityExceededError,
    CheckoutIntent,
    DeadlinePassedError,
    DraftEventError,
    IncompleteProfileError,
    NothingToPurchaseError,
    PaidCancellationError,
    ParticipantRegistrationStatus,
    ParticipantSelection,
    RegistrationEligibility,
    RegistrationError,
    RegistrationResult,
    RemovalResult,
)
from .service import EligibilityService
from .manager import RegistrationManager

__all__ = [
    "NextStep",
    "Reasons",
    "RegistrationStatus",
    "AlreadyRegisteredError",
    "CapacityExceededError",
    "CheckoutIntent",
    "DeadlinePassedError",
    "DraftEventError",
    "IncompleteProfileError",
    "NothingToPurchaseError",
    "PaidCancellationError",
    "ParticipantRegistrationStatus",
    "ParticipantSelection",
    "RegistrationEligibility",
    "RegistrationError",
    "RegistrationResult",
    "RemovalResult",
    "EligibilityService",
    "RegistrationManager",
]
