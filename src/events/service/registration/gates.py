"""Eligibility gate classes for registration.

Each gate performs one check over the whole set of participants. Gates are
composed by the EligibilityService; the first blocking gate wins.
"""

from __future__ import annotations

import abc
import typing as t

from django.utils.translation import gettext as _

from .enums import NextStep, Reasons
from .types import (
    AlreadyRegisteredError,
    CapacityExceededError,
    DeadlinePassedError,
    DraftEventError,
    IncompleteProfileError,
    RegistrationEligibility,
    RegistrationError,
)

if t.TYPE_CHECKING:
    from events.models import Event

    from .service import EligibilityService


class BaseRegistrationGate(abc.ABC):
    """Abstract Base Class for a composable registration check."""

    error_class: t.ClassVar[type[RegistrationError]]

    def __init__(self, handler: EligibilityService) -> None:
        """Initialize the eligibility check."""
        self.handler = handler
        self.event: Event = handler.event

    def block(self, reason: Reasons, next_step: NextStep | None = None, **details: t.Any) -> RegistrationEligibility:
        return RegistrationEligibility(
            allowed=False,
            event_id=self.event.pk,
            reason=_(reason),
            next_step=next_step,
            **details,
        )

    @abc.abstractmethod
    def check(self) -> RegistrationEligibility | None:
        """Perform the check.

        Returns:
            RegistrationEligibility if this gate blocks registration, None to continue to next gate.
        """


class DraftGate(BaseRegistrationGate):
    """Gate #1: Drafts are only joinable by privileged actors."""

    error_class = DraftEventError

    def check(self) -> RegistrationEligibility | None:
        """Block non-privileged callers on draft events."""
        if self.event.is_draft and not self.handler.context.is_privileged:
            return self.block(Reasons.EVENT_IS_DRAFT, NextStep.WAIT_FOR_PUBLICATION)
        return None


class DeadlineGate(BaseRegistrationGate):
    """Gate #2: Registration closes at the registration deadline."""

    error_class = DeadlinePassedError

    def check(self) -> RegistrationEligibility | None:
        """Check the deadline against the evaluation time."""
        if not self.event.registration_open(self.handler.now):
            return self.block(Reasons.DEADLINE_PASSED)
        return None


class ProfileGate(BaseRegistrationGate):
    """Gate #3: Every participant needs a complete profile."""

    error_class = IncompleteProfileError

    def check(self) -> RegistrationEligibility | None:
        """Collect missing fields for every participant."""
        missing = self.handler.missing_profile_fields
        if missing:
            return self.block(
                Reasons.REQUIRES_FULL_PROFILE,
                NextStep.COMPLETE_PROFILE,
                participant_ids=[ref.participant_id for ref in self.handler.refs if str(ref.participant_id) in missing],
                missing_profile_fields=missing,
            )
        return None


class DuplicateGate(BaseRegistrationGate):
    """Gate #4: Nobody can be registered twice."""

    error_class = AlreadyRegisteredError

    def check(self) -> RegistrationEligibility | None:
        """Block if any participant is already on the roster."""
        already = self.handler.already_registered
        if already:
            return self.block(
                Reasons.ALREADY_REGISTERED,
                participant_ids=[ref.participant_id for ref in self.handler.refs if ref in already],
            )
        return None


class CapacityGate(BaseRegistrationGate):
    """Gate #5: All participants must fit in the remaining capacity."""

    error_class = CapacityExceededError

    def check(self) -> RegistrationEligibility | None:
        """Compare the request size with the free spots."""
        remaining = self.handler.remaining_capacity
        if remaining is not None and len(self.handler.refs) > remaining:
            return self.block(Reasons.EVENT_IS_FULL, remaining_capacity=remaining)
        return None
