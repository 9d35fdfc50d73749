"""Access control for stored artifacts.

Every download and upload URL is issued here, after deciding from the object key
who may touch it. Decisions are made per request against current data.
"""

import uuid
from enum import StrEnum

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _
from pydantic import BaseModel

from common import storage
from common.auth_base import PermissionDenied
from common.context import RequestContext
from events.exceptions import ArtifactAccessDeniedError
from events.models import EVENT_IMAGE_PREFIX, Event, RosterEntry
from waivers.models import COMPLETED_PREFIX, TEMPLATE_PREFIX, Waiver

logger = structlog.get_logger(__name__)

PROFILE_IMAGE_PREFIX = "user-profiles/"

IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})
PDF_MIME_TYPES = frozenset({"application/pdf"})


class DenyReason(StrEnum):
    INVALID_KEY = "invalid_key"
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


class ArtifactKind(StrEnum):
    EVENT_IMAGE = "event_image"
    PROFILE_IMAGE = "profile_image"
    WAIVER_TEMPLATE = "waiver_template"
    WAIVER_COMPLETED = "waiver_completed"


class AccessDecision(BaseModel):
    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "AccessDecision":
        return cls(allowed=False, reason=reason)


def _split_owned_key(key: str, prefix: str) -> tuple[uuid.UUID, str] | None:
    """Parse ``<prefix><uuid>/<name>``. Returns None when the key is malformed."""
    owner, _sep, name = key.removeprefix(prefix).partition("/")
    if not name:
        return None
    try:
        return uuid.UUID(owner), name
    except ValueError:
        return None


def _is_safe_key(key: str) -> bool:
    return bool(key) and not key.startswith("/") and ".." not in key.split("/") and "//" not in key


def _authorize_event_image(context: RequestContext, key: str) -> AccessDecision:
    parsed = _split_owned_key(key, EVENT_IMAGE_PREFIX)
    if parsed is None:
        return AccessDecision.deny(DenyReason.INVALID_KEY)
    event = Event.objects.filter(pk=parsed[0]).only("pk", "is_draft").first()
    if event is None:
        return AccessDecision.deny(DenyReason.NOT_FOUND)
    if not event.is_draft or context.is_privileged:
        return AccessDecision.allow()
    if not context.is_authenticated:
        return AccessDecision.deny(DenyReason.UNAUTHENTICATED)
    # Child entries are recorded against the parent's account, so this covers both.
    if RosterEntry.objects.filter(event=event, user_id=context.actor_id).exists():
        return AccessDecision.allow()
    return AccessDecision.deny(DenyReason.FORBIDDEN)


def _authorize_profile_image(context: RequestContext, key: str) -> AccessDecision:
    parsed = _split_owned_key(key, PROFILE_IMAGE_PREFIX)
    if parsed is None:
        return AccessDecision.deny(DenyReason.INVALID_KEY)
    if context.is_privileged or (context.is_authenticated and parsed[0] == context.actor_id):
        return AccessDecision.allow()
    if not context.is_authenticated:
        return AccessDecision.deny(DenyReason.UNAUTHENTICATED)
    return AccessDecision.deny(DenyReason.FORBIDDEN)


def _authorize_completed_waiver(context: RequestContext, key: str) -> AccessDecision:
    if not context.is_authenticated and not context.is_privileged:
        return AccessDecision.deny(DenyReason.UNAUTHENTICATED)
    owner_id = Waiver.objects.completed().filter(file_key=key).values_list("belongs_to_user_id", flat=True).first()
    if owner_id is None:
        return AccessDecision.deny(DenyReason.NOT_FOUND)
    if context.is_privileged or owner_id == context.actor_id:
        return AccessDecision.allow()
    return AccessDecision.deny(DenyReason.FORBIDDEN)


def authorize(context: RequestContext, key: str) -> AccessDecision:
    """Decide whether the caller may read the object stored under ``key``.

    Rules by key prefix:
        event-images/<event>/...     anyone for published events; privileged or registered for drafts
        user-profiles/<user>/...     the owning account or privileged
        waivers/completed/...        the account the waiver belongs to or privileged
        waivers/templates/...        any authenticated caller
        anything else                denied as an invalid key
    """
    if not _is_safe_key(key):
        decision = AccessDecision.deny(DenyReason.INVALID_KEY)
    elif key.startswith(EVENT_IMAGE_PREFIX):
        decision = _authorize_event_image(context, key)
    elif key.startswith(PROFILE_IMAGE_PREFIX):
        decision = _authorize_profile_image(context, key)
    elif key.startswith(COMPLETED_PREFIX):
        decision = _authorize_completed_waiver(context, key)
    elif key.startswith(TEMPLATE_PREFIX):
        if len(key) == len(TEMPLATE_PREFIX):
            decision = AccessDecision.deny(DenyReason.INVALID_KEY)
        elif context.is_authenticated or context.is_privileged:
            decision = AccessDecision.allow()
        else:
            decision = AccessDecision.deny(DenyReason.UNAUTHENTICATED)
    else:
        decision = AccessDecision.deny(DenyReason.INVALID_KEY)

    if not decision.allowed:
        logger.info(
            "artifact_access_denied",
            key=key,
            reason=decision.reason,
            actor_id=str(context.actor_id) if context.actor_id else None,
        )
    return decision


def presigned_download(context: RequestContext, key: str) -> str:
    """Return a short-lived download URL for an allowed key.

    Raises:
        ArtifactAccessDeniedError: the gate denied the key.
    """
    decision = authorize(context, key)
    if not decision.allowed:
        raise ArtifactAccessDeniedError(_("You do not have access to this file."), str(decision.reason))
    return storage.get_blob_store().presigned_download(key, settings.PRESIGNED_DOWNLOAD_EXPIRES_IN)


def upload_prefix(context: RequestContext, kind: ArtifactKind, event_id: uuid.UUID | None = None) -> str:
    """Folder an upload of ``kind`` goes to, after checking the caller may upload it.

    Raises:
        PermissionDenied: the caller may not upload this kind of file.
        ValidationError: event images without an existing event.
    """
    if kind in (ArtifactKind.EVENT_IMAGE, ArtifactKind.WAIVER_TEMPLATE) and not context.is_privileged:
        raise PermissionDenied(_("Only administrators can upload this file."))
    if kind in (ArtifactKind.PROFILE_IMAGE, ArtifactKind.WAIVER_COMPLETED) and not context.is_authenticated:
        raise PermissionDenied(_("Authentication required."))

    match kind:
        case ArtifactKind.EVENT_IMAGE:
            if event_id is None or not Event.objects.filter(pk=event_id).exists():
                raise ValidationError({"event_id": [_("Event images need an existing event.")]})
            return f"{EVENT_IMAGE_PREFIX}{event_id}"
        case ArtifactKind.PROFILE_IMAGE:
            return f"{PROFILE_IMAGE_PREFIX}{context.actor_id}"
        case ArtifactKind.WAIVER_TEMPLATE:
            return TEMPLATE_PREFIX
        case ArtifactKind.WAIVER_COMPLETED:
            return COMPLETED_PREFIX


def presigned_upload(
    context: RequestContext,
    kind: ArtifactKind,
    file_name: str,
    mime_type: str,
    event_id: uuid.UUID | None = None,
) -> storage.PresignedUpload:
    """Issue an upload URL for one file of the given kind."""
    is_waiver = kind in (ArtifactKind.WAIVER_TEMPLATE, ArtifactKind.WAIVER_COMPLETED)
    allowed_types = PDF_MIME_TYPES if is_waiver else IMAGE_MIME_TYPES
    if mime_type not in allowed_types:
        raise ValidationError({"mime_type": [_("Unsupported file type: %s.") % mime_type]})
    prefix = upload_prefix(context, kind, event_id)
    upload = storage.get_blob_store().presigned_upload(prefix, file_name, mime_type)
    logger.info(
        "artifact_upload_issued",
        kind=kind,
        key=upload.key,
        actor_id=str(context.actor_id) if context.actor_id else None,
    )
    return upload


def list_event_images(context: RequestContext, event_id: uuid.UUID) -> list[str]:
    """Keys of the images stored for an event the caller can see."""
    prefix = f"{EVENT_IMAGE_PREFIX}{event_id}/"
    decision = authorize(context, f"{prefix}_")
    if not decision.allowed:
        raise ArtifactAccessDeniedError(_("You do not have access to these files."), str(decision.reason))
    return storage.get_blob_store().list(prefix)
