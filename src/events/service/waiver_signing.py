"""Signing required waivers for registered participants."""

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.translation import gettext as _

from accounts.models import User
from common.context import RequestContext
from events import models
from events.service import roster
from events.service.registration import ParticipantSelection, RegistrationManager
from events.service.registration.manager import conflict_guard
from waivers import service as waiver_service
from waivers.models import COMPLETED_PREFIX, Waiver

logger = structlog.get_logger(__name__)


def required_templates(event: models.Event) -> list[Waiver]:
    return list(event.required_waivers.all())


def sign_waiver(
    context: RequestContext,
    user: User,
    event: models.Event,
    template: Waiver,
    selection: ParticipantSelection,
    *,
    file_key: str,
    file_name: str,
) -> Waiver:
    """Record a signed copy of a required template and mark it signed on the roster entry.

    Signing the same template again replaces the earlier signed copy.

    Raises:
        ValidationError: template not required by the event, bad storage key, or participant not registered.
        PermissionDenied: the participant is not the caller or one of their children.
    """
    ref = RegistrationManager(context, event).resolve([selection])[0]
    if not file_key.startswith(COMPLETED_PREFIX):
        raise ValidationError({"file_key": [_("Signed waivers must be uploaded under %s.") % COMPLETED_PREFIX]})
    if not event.required_waivers.filter(pk=template.pk).exists():
        raise ValidationError({"template": [_("This waiver is not required for the event.")]})

    with conflict_guard(event.pk), transaction.atomic():
        locked_event = roster.lock_event(event.pk)
        entry = roster.entries_for(locked_event, [ref]).first()
        if entry is None:
            raise ValidationError({"participant_id": [_("The participant is not registered for this event.")]})

        replaced = waiver_service.delete_all(event.pk, ref, template_id=template.pk, keep_files=[file_key])
        waiver = waiver_service.create(
            event=locked_event,
            ref=ref,
            template=template,
            file_key=file_key,
            file_name=file_name,
            uploaded_by=user,
        )
        entry.waiver_status[str(template.pk)] = models.RosterEntry.WaiverStatus.SIGNED
        entry.save(update_fields=["waiver_status", "updated_at"])

    logger.info(
        "waiver_signed",
        event_id=str(event.pk),
        template_id=str(template.pk),
        participant_id=str(ref.participant_id),
        replaced=replaced,
    )
    return waiver
