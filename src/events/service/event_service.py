"""Event administration: create, update, delete, participants and required waivers."""

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.utils.translation import gettext as _

from accounts.models import User
from common.tasks import delete_blobs
from events import models, schema
from events.service import roster, update_db_instance
from events.service.registration.manager import conflict_guard
from waivers import service as waiver_service
from waivers.models import TEMPLATE_PREFIX, Waiver

logger = structlog.get_logger(__name__)


def create_event(user: User, payload: schema.EventCreateSchema) -> models.Event:
    """Create an event. New events start as drafts unless published explicitly."""
    event = models.Event.objects.create(created_by=user, **payload.model_dump())
    logger.info("event_created", event_id=str(event.pk), user_id=str(user.pk), is_draft=event.is_draft)
    return event


def update_event(event: models.Event, payload: schema.EventUpdateSchema) -> models.Event:
    """Apply a partial update under the event row lock.

    Raises:
        ValidationError: the new capacity is below the number of registered participants.
    """
    with conflict_guard(event.pk), transaction.atomic():
        locked = roster.lock_event(event.pk)
        if payload.capacity:
            registered = roster.participant_count(locked)
            if payload.capacity < registered:
                message = _("%(count)d participants are already registered.") % {"count": registered}
                raise ValidationError({"capacity": [message]})
        event = update_db_instance(locked, payload)
    logger.info("event_updated", event_id=str(event.pk), fields=sorted(payload.model_dump(exclude_unset=True)))
    return event


def delete_event(event: models.Event) -> None:
    """Delete an event with its roster, waivers and profile links.

    Stored images and waiver files are removed after the transaction commits.
    """
    event_id = str(event.pk)
    with conflict_guard(event.pk), transaction.atomic():
        locked = roster.lock_event(event.pk)
        file_keys = list(locked.image_keys)
        file_keys.extend(Waiver.objects.filter(event=locked).values_list("file_key", flat=True))
        participants = locked.roster.count()
        # Roster entries, waivers and registered-event links cascade with the event row.
        locked.delete()
        if file_keys:
            transaction.on_commit(lambda: delete_blobs.delay(file_keys))
    logger.info("event_deleted", event_id=event_id, participants=participants, files=len(file_keys))


def list_participants(event: models.Event) -> QuerySet[models.RosterEntry]:
    return models.RosterEntry.objects.filter(event=event).select_related("user", "child")


def contact_emails(event: models.Event) -> list[str]:
    """Distinct emails of registered adults and of the parents of registered children."""
    emails = (
        models.RosterEntry.objects.filter(event=event)
        .exclude(user__email="")
        .values_list("user__email", flat=True)
        .distinct()
    )
    return sorted(set(emails))


def attach_waiver_template(
    event: models.Event, user: User, payload: schema.WaiverTemplateCreateSchema
) -> Waiver:
    """Add a required waiver template. Existing participants get it as pending."""
    if not payload.file_key.startswith(TEMPLATE_PREFIX):
        raise ValidationError({"file_key": [_("Waiver templates must be uploaded under %s.") % TEMPLATE_PREFIX]})
    with conflict_guard(event.pk), transaction.atomic():
        locked = roster.lock_event(event.pk)
        template = waiver_service.create_template(
            uploaded_by=user, file_key=payload.file_key, file_name=payload.file_name, event=locked
        )
        locked.required_waivers.add(template)
        for entry in models.RosterEntry.objects.filter(event=locked):
            entry.waiver_status.setdefault(str(template.pk), models.RosterEntry.WaiverStatus.PENDING)
            entry.save(update_fields=["waiver_status", "updated_at"])
    logger.info("event_waiver_template_attached", event_id=str(event.pk), template_id=str(template.pk))
    return template


def detach_waiver_template(event: models.Event, template: Waiver) -> None:
    """Stop requiring a template. Signed copies are kept; the roster no longer tracks it."""
    with conflict_guard(event.pk), transaction.atomic():
        locked = roster.lock_event(event.pk)
        locked.required_waivers.remove(template)
        for entry in models.RosterEntry.objects.filter(event=locked):
            if entry.waiver_status.pop(str(template.pk), None) is not None:
                entry.save(update_fields=["waiver_status", "updated_at"])
    logger.info("event_waiver_template_detached", event_id=str(event.pk), template_id=str(template.pk))


def registered_events(user: User) -> list[schema.RegisteredEventSchema]:
    """Events the account is on the roster of, with the names of its registered participants."""
    entries = (
        models.RosterEntry.objects.filter(user=user)
        .select_related("event", "user", "child")
        .order_by("event__start", "created_at")
    )
    result: dict[str, schema.RegisteredEventSchema] = {}
    for entry in entries:
        key = str(entry.event_id)
        if key not in result:
            item = schema.RegisteredEventSchema.from_orm(entry.event)
            item.registered_at = entry.created_at
            result[key] = item
        result[key].participants.append(entry.participant_name())
    return list(result.values())
