"""Types and exceptions for the registration eligibility system."""

import typing as t
import uuid

from django.utils.translation import gettext as _
from pydantic import BaseModel, Field

from .enums import NextStep, Reasons, RegistrationStatus


class ParticipantSelection(BaseModel):
    """A participant picked by the caller: themselves, or one of their children."""

    participant_id: uuid.UUID
    is_child: bool = False


class RegistrationEligibility(BaseModel):
    """Result of an eligibility check for a set of participants on an event."""

    allowed: bool
    event_id: uuid.UUID
    reason: str | None = None  # we don't use the enum here because we want translation
    next_step: NextStep | None = None
    participant_ids: list[uuid.UUID] | None = None
    missing_profile_fields: dict[str, list[str]] | None = None
    remaining_capacity: int | None = None
    amount: int | None = None


class RegistrationResult(BaseModel):
    status: RegistrationStatus
    event_id: uuid.UUID
    participants: list[ParticipantSelection]
    entry_ids: list[uuid.UUID] = Field(default_factory=list)
    amount: int = 0
    currency: str


class RemovalResult(BaseModel):
    event_id: uuid.UUID
    participant_id: uuid.UUID
    is_child: bool
    removed: bool
    waivers_deleted: int


class CheckoutIntent(BaseModel):
    """What a Checkout Session pays for, carried in the session metadata."""

    event_id: uuid.UUID
    payer_id: uuid.UUID
    participants: list[ParticipantSelection]
    origin: str = ""


class RegistrationError(Exception):
    """Base class for refusals carrying the eligibility that explains them."""

    reason: t.ClassVar[Reasons]
    next_step: t.ClassVar[NextStep | None] = None

    def __init__(self, message: str, eligibility: RegistrationEligibility) -> None:
        """Initialize the exception with eligibility details."""
        super().__init__(message)
        self.eligibility = eligibility

    @classmethod
    def build(cls, event_id: uuid.UUID, **details: t.Any) -> t.Self:
        """Create the error together with its eligibility payload."""
        eligibility = RegistrationEligibility(
            allowed=False,
            event_id=event_id,
            reason=_(cls.reason),
            next_step=cls.next_step,
            **details,
        )
        return cls(eligibility.reason or "", eligibility)


class DraftEventError(RegistrationError):
    reason = Reasons.EVENT_IS_DRAFT
    next_step = NextStep.WAIT_FOR_PUBLICATION


class DeadlinePassedError(RegistrationError):
    reason = Reasons.DEADLINE_PASSED


class IncompleteProfileError(RegistrationError):
    reason = Reasons.REQUIRES_FULL_PROFILE
    next_step = NextStep.COMPLETE_PROFILE


class AlreadyRegisteredError(RegistrationError):
    reason = Reasons.ALREADY_REGISTERED


class CapacityExceededError(RegistrationError):
    reason = Reasons.EVENT_IS_FULL


class NothingToPurchaseError(RegistrationError):
    reason = Reasons.NOTHING_TO_PURCHASE


class PaidCancellationError(RegistrationError):
    reason = Reasons.PAID_CANCELLATION
    next_step = NextStep.CONTACT_ADMIN


class ParticipantRegistrationStatus(BaseModel):
    participant_id: uuid.UUID
    is_child: bool
    name: str
    registered: bool
    profile_complete: bool
    waiver_status: dict[str, str] = Field(default_factory=dict)
    all_waivers_signed: bool = False
