"""Profile lookups, completeness rules and registered-event bookkeeping."""

import uuid

import structlog
from django.db import models
from django.db.models import Prefetch

from accounts.exceptions import ParticipantNotFoundError, ParticipantOwnershipError
from accounts.models import Child, EmergencyContact, User
from accounts.participants import AdultRef, ChildRef, ParticipantRef

logger = structlog.get_logger(__name__)

ADULT_REQUIRED_FIELDS = ("first_name", "last_name", "email", "gender", "birthday")
CHILD_REQUIRED_FIELDS = ("first_name", "last_name", "gender", "birthday")
ADDRESS_FIELDS = ("address_home", "address_city", "address_zip_code")

Profile = User | Child


def find_by_external_id(user_id: uuid.UUID | str) -> User | None:
    """Return the account for an identity-provider subject, or None."""
    return User.objects.filter(pk=user_id).first()


def resolve(ref: ParticipantRef) -> Profile:
    """Load the profile a reference points at.

    Raises:
        ParticipantNotFoundError: if the user or child no longer exists.
    """
    contacts = Prefetch("emergency_contacts", queryset=EmergencyContact.objects.all())
    if isinstance(ref, ChildRef):
        child = (
            Child.objects.select_related("parent")
            .prefetch_related(contacts)
            .filter(pk=ref.child_id, parent_id=ref.parent_id)
            .first()
        )
        if child is None:
            raise ParticipantNotFoundError(f"Child {ref.child_id} not found.")
        return child
    user = User.objects.prefetch_related(contacts).filter(pk=ref.user_id).first()
    if user is None:
        raise ParticipantNotFoundError(f"User {ref.user_id} not found.")
    return user


def resolve_selection(account_id: uuid.UUID, participant_id: uuid.UUID, is_child: bool) -> ParticipantRef:
    """Turn a client selection into a reference, enforcing that the account owns the participant.

    An account may act for itself and for its own children only.

    Raises:
        ParticipantNotFoundError: unknown participant.
        ParticipantOwnershipError: participant belongs to another account.
    """
    if not is_child:
        if participant_id != account_id:
            raise ParticipantOwnershipError("You can only register yourself or your children.")
        if not User.objects.filter(pk=participant_id).exists():
            raise ParticipantNotFoundError(f"User {participant_id} not found.")
        return AdultRef(user_id=participant_id)

    parent_id = Child.objects.filter(pk=participant_id).values_list("parent_id", flat=True).first()
    if parent_id is None:
        raise ParticipantNotFoundError(f"Child {participant_id} not found.")
    if parent_id != account_id:
        raise ParticipantOwnershipError("You can only register yourself or your children.")
    return ChildRef(parent_id=parent_id, child_id=participant_id)


def ref_for(participant_id: uuid.UUID, is_child: bool) -> ParticipantRef:
    """Reference to any participant, without an ownership check. For administrative use.

    Raises:
        ParticipantNotFoundError: unknown child.
    """
    if not is_child:
        return AdultRef(user_id=participant_id)
    parent_id = Child.objects.filter(pk=participant_id).values_list("parent_id", flat=True).first()
    if parent_id is None:
        raise ParticipantNotFoundError(f"Child {participant_id} not found.")
    return ChildRef(parent_id=parent_id, child_id=participant_id)


def account_refs(user: User) -> list[ParticipantRef]:
    """The account holder and all of their children."""
    refs: list[ParticipantRef] = [AdultRef(user_id=user.pk)]
    child_ids = user.children.values_list("pk", flat=True)
    refs.extend(ChildRef(parent_id=user.pk, child_id=child_id) for child_id in child_ids)
    return refs


def _has_complete_contact(profile: Profile) -> bool:
    return any(contact.is_complete for contact in profile.emergency_contacts.all())


def missing_profile_fields(profile: Profile) -> list[str]:
    """List the fields that keep a profile from being complete.

    Children share their parent's address, so an incomplete parent address is
    reported against the child as ``parent_address``.
    """
    if isinstance(profile, Child):
        missing = [name for name in CHILD_REQUIRED_FIELDS if not getattr(profile, name)]
        if not all(getattr(profile.parent, name) for name in ADDRESS_FIELDS):
            missing.append("parent_address")
    else:
        missing = [name for name in ADULT_REQUIRED_FIELDS if not getattr(profile, name)]
        missing.extend(name for name in ADDRESS_FIELDS if not getattr(profile, name))
    if profile.photo_release is None:
        missing.append("photo_release")
    if not _has_complete_contact(profile):
        missing.append("emergency_contact")
    return missing


def is_complete(profile: Profile) -> bool:
    return not missing_profile_fields(profile)


def _registered_events_through(ref: ParticipantRef) -> tuple[type[models.Model], str, uuid.UUID]:
    if isinstance(ref, ChildRef):
        return Child.registered_events.through, "child_id", ref.child_id
    return User.registered_events.through, "user_id", ref.user_id


def append_registered_event(ref: ParticipantRef, event_id: uuid.UUID) -> None:
    """Record the event on the participant's profile. Idempotent."""
    through, column, owner_id = _registered_events_through(ref)
    through.objects.get_or_create(**{column: owner_id, "event_id": event_id})


def remove_registered_event(ref: ParticipantRef, event_id: uuid.UUID) -> None:
    """Drop the event from the participant's profile. Idempotent."""
    through, column, owner_id = _registered_events_through(ref)
    deleted, _ = through.objects.filter(**{column: owner_id, "event_id": event_id}).delete()
    if deleted:
        logger.info("profile_registered_event_removed", participant_id=str(owner_id), event_id=str(event_id))
