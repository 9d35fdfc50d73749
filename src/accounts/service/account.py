"""Service layer for profiles and children."""

import typing as t

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.translation import gettext_lazy as _

from accounts import schema
from accounts.models import Child, EmergencyContact, User
from accounts.participants import ChildRef
from accounts.service import profile_store
from common.context import RequestContext
from common.tasks import delete_blobs
from events.models import Event
from events.service.registration import RegistrationManager
from waivers.models import Waiver

logger = structlog.get_logger(__name__)

NULLABLE_FIELDS = {"photo_release", "birthday"}


def _profile_image_prefix(user: User) -> str:
    return f"user-profiles/{user.pk}/"


def _apply(instance: User | Child, data: dict[str, t.Any], image_owner: User) -> None:
    for key, value in data.items():
        if value is None and key not in NULLABLE_FIELDS:
            value = ""
        if key == "image_key" and value and not value.startswith(_profile_image_prefix(image_owner)):
            raise ValidationError({"image_key": [str(_("Profile images must be uploaded under your own folder."))]})
        setattr(instance, key, value)


def _replace_emergency_contacts(owner: User | Child, contacts: list[schema.EmergencyContactIn]) -> None:
    owner_field = "child" if isinstance(owner, Child) else "user"
    EmergencyContact.objects.filter(**{owner_field: owner}).delete()
    for contact in contacts:
        EmergencyContact.objects.create(**{owner_field: owner}, **contact.model_dump())


@transaction.atomic
def update_profile(user: User, payload: schema.ProfileUpdateSchema) -> User:
    """Apply a partial profile update and, when given, replace the emergency contacts."""
    data = payload.model_dump(exclude_unset=True)
    contacts = data.pop("emergency_contacts", None)
    user = User.objects.select_for_update().get(pk=user.pk)
    _apply(user, data, image_owner=user)
    user.full_clean()
    user.save()
    if contacts is not None:
        _replace_emergency_contacts(user, payload.emergency_contacts or [])
    logger.info("profile_updated", user_id=str(user.pk), fields=sorted(data.keys()))
    return user


@transaction.atomic
def create_child(user: User, payload: schema.ChildCreateSchema) -> Child:
    """Add a child to the account."""
    data = payload.model_dump(exclude={"emergency_contacts"})
    child = Child(parent=user)
    _apply(child, data, image_owner=user)
    child.save()
    _replace_emergency_contacts(child, payload.emergency_contacts)
    logger.info("child_created", user_id=str(user.pk), child_id=str(child.pk))
    return child


@transaction.atomic
def update_child(child: Child, payload: schema.ChildUpdateSchema) -> Child:
    """Apply a partial update to a child profile."""
    data = payload.model_dump(exclude_unset=True)
    contacts = data.pop("emergency_contacts", None)
    child = Child.objects.select_for_update().select_related("parent").get(pk=child.pk)
    _apply(child, data, image_owner=child.parent)
    child.save()
    if contacts is not None:
        _replace_emergency_contacts(child, payload.emergency_contacts or [])
    logger.info("child_updated", child_id=str(child.pk), fields=sorted(data.keys()))
    return child


def delete_child(child: Child) -> None:
    """Delete a child.

    The child is first taken off every roster through the regular removal, under each
    event's lock, which also deletes their signed waivers. Any remaining waivers go with
    the child; stored waiver files are deleted once the transaction has committed.
    """
    ref = ChildRef(parent_id=child.parent_id, child_id=child.pk)
    child_id = str(child.pk)
    with transaction.atomic():
        events = Event.objects.filter(roster__child=child).distinct()
        removals = [RegistrationManager(RequestContext.system(), event).remove_participant(ref) for event in events]
        file_keys = list(Waiver.objects.filter(child=child).values_list("file_key", flat=True))
        child.delete()
        if file_keys:
            transaction.on_commit(lambda: delete_blobs.delay(file_keys))
    logger.info(
        "child_deleted",
        child_id=child_id,
        rosters_left=len(removals),
        waivers_deleted=sum(r.waivers_deleted for r in removals) + len(file_keys),
    )


def profile_status(user: User) -> schema.ProfileStatusSchema:
    """Completeness of the account holder's profile and of each child's."""
    participants = []
    for ref in profile_store.account_refs(user):
        profile = profile_store.resolve(ref)
        missing = profile_store.missing_profile_fields(profile)
        participants.append(
            schema.ParticipantStatusSchema(
                participant_id=ref.participant_id,
                is_child=ref.is_child,
                name=profile.get_full_name(),
                complete=not missing,
                missing_fields=missing,
            )
        )
    return schema.ProfileStatusSchema(complete=all(p.complete for p in participants), participants=participants)
