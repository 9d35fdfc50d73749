"""Waiver store: templates and completed (signed) waivers."""

import typing as t
import uuid

import structlog
from django.db import transaction
from django.db.models import QuerySet

from accounts.models import User
from accounts.participants import ChildRef, ParticipantRef, participant_filter
from common.tasks import delete_blobs
from waivers.models import Waiver

if t.TYPE_CHECKING:
    from events.models import Event

logger = structlog.get_logger(__name__)


def _participant_scope(event_id: uuid.UUID, ref: ParticipantRef) -> QuerySet[Waiver]:
    return Waiver.objects.completed().filter(
        participant_filter(ref, user_field="belongs_to_user"),
        event_id=event_id,
    )


def create_template(*, uploaded_by: User, file_key: str, file_name: str, event: "Event | None" = None) -> Waiver:
    """Register an uploaded template PDF."""
    waiver = Waiver.objects.create(
        kind=Waiver.Kind.TEMPLATE,
        event=event,
        file_key=file_key,
        file_name=file_name,
        uploaded_by=uploaded_by,
    )
    logger.info("waiver_template_created", waiver_id=str(waiver.pk), event_id=str(event.pk) if event else None)
    return waiver


def create(
    *,
    event: "Event",
    ref: ParticipantRef,
    template: Waiver,
    file_key: str,
    file_name: str,
    uploaded_by: User,
) -> Waiver:
    """Record a completed waiver for one participant, one template and one event."""
    waiver = Waiver.objects.create(
        kind=Waiver.Kind.COMPLETED,
        event=event,
        template=template,
        file_key=file_key,
        file_name=file_name,
        uploaded_by=uploaded_by,
        belongs_to_user_id=ref.account_id,
        child_id=ref.child_id if isinstance(ref, ChildRef) else None,
        is_for_child=ref.is_child,
    )
    logger.info(
        "waiver_completed_created",
        waiver_id=str(waiver.pk),
        event_id=str(event.pk),
        template_id=str(template.pk),
        participant_id=str(ref.participant_id),
        is_child=ref.is_child,
    )
    return waiver


def find_completed(event_id: uuid.UUID, ref: ParticipantRef) -> QuerySet[Waiver]:
    """Completed waivers of one participant for one event."""
    return _participant_scope(event_id, ref)


def list_completed(
    event_id: uuid.UUID, *, user_id: uuid.UUID | None = None, child_id: uuid.UUID | None = None
) -> QuerySet[Waiver]:
    """Completed waivers of an event, optionally narrowed to an account or a child."""
    qs = Waiver.objects.completed().filter(event_id=event_id).select_related("belongs_to_user", "child")
    if user_id:
        qs = qs.filter(belongs_to_user_id=user_id)
    if child_id:
        qs = qs.filter(child_id=child_id)
    return qs


def delete_all(
    event_id: uuid.UUID,
    ref: ParticipantRef,
    *,
    template_id: uuid.UUID | None = None,
    keep_files: t.Collection[str] = (),
) -> int:
    """Delete every completed waiver scoped to (event, participant), or to one template of it.

    Must run inside the caller's transaction; stored files are removed after it commits,
    except those listed in ``keep_files`` (still referenced by a replacement row).

    Returns:
        The number of waivers deleted.
    """
    scope = _participant_scope(event_id, ref)
    if template_id is not None:
        scope = scope.filter(template_id=template_id)
    file_keys = list(scope.values_list("file_key", flat=True))
    if not file_keys:
        return 0
    scope.delete()
    stale_keys = [key for key in file_keys if key not in keep_files]
    if stale_keys:
        transaction.on_commit(lambda: delete_blobs.delay(stale_keys))
    logger.info(
        "waivers_deleted",
        event_id=str(event_id),
        participant_id=str(ref.participant_id),
        count=len(file_keys),
    )
    return len(file_keys)
