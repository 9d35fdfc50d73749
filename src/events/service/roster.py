"""Event roster primitives.

Every mutation must run inside a transaction that already holds the event row
lock taken by :func:`lock_event`.
"""

import uuid
from collections.abc import Iterable

import structlog
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet

from accounts.participants import ChildRef, ParticipantRef, participant_filter
from events.models import Event, RosterEntry
from events.service.registration.types import AlreadyRegisteredError, CapacityExceededError

logger = structlog.get_logger(__name__)


def lock_event(event_id: uuid.UUID) -> Event:
    """Take the row lock that serializes all roster mutations of one event."""
    return Event.objects.select_for_update().get(pk=event_id)


def entries_for(event: Event, refs: Iterable[ParticipantRef]) -> QuerySet[RosterEntry]:
    """Roster entries of the given participants."""
    query = Q()
    for ref in refs:
        query |= participant_filter(ref)
    if not query:
        return RosterEntry.objects.none()
    return RosterEntry.objects.filter(query, event=event)


def registered_refs(event: Event, refs: Iterable[ParticipantRef]) -> set[ParticipantRef]:
    """The subset of ``refs`` already on the roster."""
    return {entry.ref for entry in entries_for(event, refs)}


def is_registered(event: Event, ref: ParticipantRef) -> bool:
    return RosterEntry.objects.filter(participant_filter(ref), event=event).exists()


def participant_count(event: Event) -> int:
    return RosterEntry.objects.filter(event=event).count()


def remaining_capacity(event: Event) -> int | None:
    """Free spots left, or None when the event has no capacity limit."""
    if not event.has_capacity_limit:
        return None
    return max(event.capacity - participant_count(event), 0)


def register(event: Event, ref: ParticipantRef, required_waivers: Iterable[uuid.UUID]) -> RosterEntry:
    """Add one participant to the roster with every required waiver pending.

    Raises:
        AlreadyRegisteredError: the participant already has an entry.
        CapacityExceededError: the roster is full.
    """
    if is_registered(event, ref):
        raise AlreadyRegisteredError.build(event.pk, participant_ids=[ref.participant_id])
    if event.has_capacity_limit and participant_count(event) >= event.capacity:
        raise CapacityExceededError.build(event.pk, participant_ids=[ref.participant_id], remaining_capacity=0)
    try:
        with transaction.atomic():
            entry = RosterEntry.objects.create(
                event=event,
                user_id=ref.account_id,
                child_id=ref.child_id if isinstance(ref, ChildRef) else None,
                waiver_status={str(template_id): RosterEntry.WaiverStatus.PENDING for template_id in required_waivers},
            )
    except IntegrityError as e:
        raise AlreadyRegisteredError.build(event.pk, participant_ids=[ref.participant_id]) from e
    logger.info(
        "roster_entry_created",
        event_id=str(event.pk),
        participant_id=str(ref.participant_id),
        is_child=ref.is_child,
    )
    return entry


def remove(event: Event, ref: ParticipantRef) -> bool:
    """Remove a participant. Removing someone who is not registered is a no-op.

    Returns:
        Whether an entry was removed.
    """
    deleted, _ = RosterEntry.objects.filter(participant_filter(ref), event=event).delete()
    if deleted:
        logger.info("roster_entry_removed", event_id=str(event.pk), participant_id=str(ref.participant_id))
    return bool(deleted)

