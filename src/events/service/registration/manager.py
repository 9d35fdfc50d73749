"""RegistrationManager: the single write path for event rosters."""

import typing as t
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import OperationalError, transaction
from django.utils.translation import gettext as _

from accounts.exceptions import ParticipantOwnershipError
from accounts.models import User
from accounts.participants import ParticipantRef
from accounts.service import profile_store
from common.auth_base import PermissionDenied
from common.context import RequestContext
from events import models
from events.exceptions import TransactionConflictError
from events.service import roster
from waivers import service as waiver_service

from .enums import RegistrationStatus
from .service import EligibilityService
from .types import (
    AlreadyRegisteredError,
    CapacityExceededError,
    CheckoutIntent,
    PaidCancellationError,
    ParticipantRegistrationStatus,
    ParticipantSelection,
    RegistrationEligibility,
    RegistrationResult,
    RemovalResult,
)

logger = structlog.get_logger(__name__)


@contextmanager
def conflict_guard(event_id: uuid.UUID) -> Iterator[None]:
    """Turn lock and serialization failures into a retryable conflict."""
    try:
        yield
    except OperationalError as e:
        logger.warning("registration_transaction_conflict", event_id=str(event_id), error=str(e))
        raise TransactionConflictError() from e


class RegistrationManager:
    """The Registration Manager Class.

    Validates and commits registrations and removals for one event on behalf of
    one caller. Free events are committed synchronously; paid events return a
    payment requirement and are committed by :meth:`confirm_payment` once the
    payment processor confirms the checkout.
    """

    def __init__(self, context: RequestContext, event: models.Event) -> None:
        """Initialize the RegistrationManager."""
        self.context = context
        self.event = event

    def resolve(
        self, selections: t.Sequence[ParticipantSelection], account_id: uuid.UUID | None = None
    ) -> list[ParticipantRef]:
        """Turn selections into participant references owned by the account.

        Raises:
            ValidationError: empty or oversized selection.
            PermissionDenied: anonymous caller, or a participant of another account.
            ParticipantNotFoundError: unknown participant.
        """
        account_id = account_id or self.context.actor_id
        if account_id is None:
            raise PermissionDenied(_("Authentication required."))
        unique = list(dict.fromkeys((s.participant_id, s.is_child) for s in selections))
        if not unique:
            raise ValidationError({"participants": [_("Select at least one participant.")]})
        limit = settings.MAX_PARTICIPANTS_PER_CHECKOUT
        if len(unique) > limit:
            message = _("At most %(max)d participants per registration.") % {"max": limit}
            raise ValidationError({"participants": [message]})
        try:
            return [profile_store.resolve_selection(account_id, pid, is_child) for pid, is_child in unique]
        except ParticipantOwnershipError as e:
            raise PermissionDenied(str(e)) from e

    def check_eligibility(self, refs: t.Sequence[ParticipantRef]) -> RegistrationEligibility:
        return EligibilityService(self.context, self.event, refs).check_eligibility()

    def join(self, selections: t.Sequence[ParticipantSelection]) -> RegistrationResult:
        """Register the caller and/or their children.

        Returns:
            REGISTERED with the new roster entries for free events, or
            PAYMENT_REQUIRED with the amount due for paid events (nothing is written).

        Raises:
            RegistrationError subclasses when a gate blocks.
        """
        refs = self.resolve(selections)
        EligibilityService(self.context, self.event, refs).assert_eligible()
        participants = [ParticipantSelection(participant_id=r.participant_id, is_child=r.is_child) for r in refs]

        if not self.event.is_free:
            amount = self.event.fee * len(refs)
            logger.info(
                "registration_payment_required",
                event_id=str(self.event.pk),
                participant_count=len(refs),
                amount=amount,
            )
            return RegistrationResult(
                status=RegistrationStatus.PAYMENT_REQUIRED,
                event_id=self.event.pk,
                participants=participants,
                amount=amount,
                currency=self.event.currency,
            )

        entries = self.commit(refs)
        return RegistrationResult(
            status=RegistrationStatus.REGISTERED,
            event_id=self.event.pk,
            participants=participants,
            entry_ids=[entry.pk for entry in entries],
            currency=self.event.currency,
        )

    def commit(
        self, refs: t.Sequence[ParticipantRef], *, tolerate_existing: bool = False
    ) -> list[models.RosterEntry]:
        """Atomically put all participants on the roster and link the event to their profiles.

        Duplicates and capacity are re-checked under the event lock, so a check that
        passed earlier in the request cannot be invalidated by a concurrent writer.

        Args:
            refs: Participants to register.
            tolerate_existing: Treat already-registered participants as success
                (used when replaying a payment confirmation).

        Returns:
            The roster entries created by this call.

        Raises:
            AlreadyRegisteredError: a participant is on the roster and tolerate_existing is False.
            CapacityExceededError: not enough free spots left.
            ParticipantNotFoundError: a participant vanished since the check.
            TransactionConflictError: lock or serialization failure; retry.
        """
        with conflict_guard(self.event.pk), transaction.atomic():
            event = roster.lock_event(self.event.pk)
            self.event = event

            existing = roster.registered_refs(event, refs)
            if existing and not tolerate_existing:
                raise AlreadyRegisteredError.build(
                    event.pk, participant_ids=[r.participant_id for r in refs if r in existing]
                )
            new_refs = [r for r in refs if r not in existing]
            for ref in new_refs:
                profile_store.resolve(ref)

            remaining = roster.remaining_capacity(event)
            if remaining is not None and len(new_refs) > remaining:
                raise CapacityExceededError.build(event.pk, remaining_capacity=remaining)

            required_waivers = list(event.required_waivers.values_list("pk", flat=True))
            entries = [roster.register(event, ref, required_waivers) for ref in new_refs]
            for ref in new_refs:
                profile_store.append_registered_event(ref, event.pk)

        logger.info(
            "registration_committed",
            event_id=str(self.event.pk),
            registered=len(entries),
            already_registered=len(existing),
        )
        return entries

    def confirm_payment(
        self,
        intent: CheckoutIntent,
        *,
        session_id: str,
        amount: int,
        currency: str,
        payment_intent_id: str | None = None,
        raw_response: dict[str, t.Any] | None = None,
    ) -> list[models.RosterEntry]:
        """Commit a paid registration confirmed by the payment processor. Idempotent per session.

        Profile and deadline checks are not repeated: the participants already
        passed them when the checkout was initiated and have paid since.
        """
        refs = self.resolve(intent.participants, account_id=intent.payer_id)
        with conflict_guard(self.event.pk), transaction.atomic():
            roster.lock_event(self.event.pk)
            if models.Payment.objects.filter(stripe_session_id=session_id).exists():
                logger.warning("stripe_webhook_duplicate_payment_success", session_id=session_id)
                return []
            entries = self.commit(refs, tolerate_existing=True)
            models.Payment.objects.create(
                event=self.event,
                payer_id=intent.payer_id,
                stripe_session_id=session_id,
                stripe_payment_intent_id=payment_intent_id,
                amount=amount,
                currency=currency,
                participants=[p.model_dump(mode="json") for p in intent.participants],
                raw_response=raw_response or {},
            )
        logger.info(
            "registration_payment_confirmed",
            event_id=str(self.event.pk),
            session_id=session_id,
            registered=len(entries),
        )
        return entries

    def remove_participant(self, ref: ParticipantRef) -> RemovalResult:
        """Administrative removal of one participant, including their waivers.

        Raises:
            PermissionDenied: caller is not privileged.
        """
        if not self.context.is_privileged:
            raise PermissionDenied(_("Only administrators can remove participants."))
        return self._remove(ref)

    def unregister(self, selections: t.Sequence[ParticipantSelection]) -> list[RemovalResult]:
        """Let a caller withdraw themselves or their children from a free event.

        Raises:
            PaidCancellationError: paid registrations are cancelled by administrators only.
        """
        refs = self.resolve(selections)
        if not self.event.is_free:
            raise PaidCancellationError.build(self.event.pk)
        with conflict_guard(self.event.pk), transaction.atomic():
            return [self._remove(ref) for ref in refs]

    def _remove(self, ref: ParticipantRef) -> RemovalResult:
        """Delete the roster entry, the profile link and the waivers of one participant, all or nothing."""
        with conflict_guard(self.event.pk), transaction.atomic():
            event = roster.lock_event(self.event.pk)
            removed = roster.remove(event, ref)
            profile_store.remove_registered_event(ref, event.pk)
            waivers_deleted = waiver_service.delete_all(event.pk, ref)

        logger.info(
            "participant_removed",
            event_id=str(self.event.pk),
            participant_id=str(ref.participant_id),
            is_child=ref.is_child,
            removed=removed,
            waivers_deleted=waivers_deleted,
        )
        return RemovalResult(
            event_id=self.event.pk,
            participant_id=ref.participant_id,
            is_child=ref.is_child,
            removed=removed,
            waivers_deleted=waivers_deleted,
        )

    def participant_statuses(self, user: User) -> list[ParticipantRegistrationStatus]:
        """Registration and waiver state of the account holder and each of their children."""
        refs = profile_store.account_refs(user)
        entries = {entry.ref: entry for entry in roster.entries_for(self.event, refs)}
        statuses = []
        for ref in refs:
            profile = profile_store.resolve(ref)
            entry = entries.get(ref)
            statuses.append(
                ParticipantRegistrationStatus(
                    participant_id=ref.participant_id,
                    is_child=ref.is_child,
                    name=profile.get_full_name(),
                    registered=entry is not None,
                    profile_complete=profile_store.is_complete(profile),
                    waiver_status=entry.waiver_status if entry else {},
                    all_waivers_signed=entry.all_waivers_signed if entry else False,
                )
            )
        return statuses
