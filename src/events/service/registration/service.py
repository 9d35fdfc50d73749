"""Eligibility service composing the registration gates."""

import typing as t
from datetime import datetime
from functools import cached_property

from django.utils import timezone

from accounts.participants import ParticipantRef
from accounts.service import profile_store
from common.context import RequestContext
from events import models
from events.service import roster

from .gates import BaseRegistrationGate, CapacityGate, DeadlineGate, DraftGate, DuplicateGate, ProfileGate
from .types import RegistrationEligibility

GATES: tuple[type[BaseRegistrationGate], ...] = (DraftGate, DeadlineGate, ProfileGate, DuplicateGate, CapacityGate)


class EligibilityService:
    """Runs every gate for a set of participants before anything is written."""

    def __init__(
        self,
        context: RequestContext,
        event: models.Event,
        refs: t.Sequence[ParticipantRef],
        now: datetime | None = None,
    ) -> None:
        """Initialize the service for one request."""
        self.context = context
        self.event = event
        self.refs = list(refs)
        self.now = now or timezone.now()

    @cached_property
    def missing_profile_fields(self) -> dict[str, list[str]]:
        """Missing fields keyed by participant id, only for incomplete profiles."""
        missing: dict[str, list[str]] = {}
        for ref in self.refs:
            fields = profile_store.missing_profile_fields(profile_store.resolve(ref))
            if fields:
                missing[str(ref.participant_id)] = fields
        return missing

    @cached_property
    def already_registered(self) -> set[ParticipantRef]:
        return roster.registered_refs(self.event, self.refs)

    @cached_property
    def remaining_capacity(self) -> int | None:
        return roster.remaining_capacity(self.event)

    def blocking_gate(self) -> tuple[BaseRegistrationGate, RegistrationEligibility] | None:
        for gate_class in GATES:
            gate = gate_class(self)
            if (eligibility := gate.check()) is not None:
                return gate, eligibility
        return None

    def check_eligibility(self) -> RegistrationEligibility:
        """Evaluate all gates without raising."""
        blocked = self.blocking_gate()
        if blocked:
            return blocked[1]
        return RegistrationEligibility(
            allowed=True,
            event_id=self.event.pk,
            remaining_capacity=self.remaining_capacity,
        )

    def assert_eligible(self) -> None:
        """Raise the blocking gate's error, if any."""
        blocked = self.blocking_gate()
        if blocked:
            gate, eligibility = blocked
            raise gate.error_class(eligibility.reason or "", eligibility)
