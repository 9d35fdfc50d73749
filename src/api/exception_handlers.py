"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from accounts.exceptions import ParticipantNotFoundError
from events.exceptions import (
    ArtifactAccessDeniedError,
    InvalidSignatureError,
    PaymentReconciliationError,
    TransactionConflictError,
    UpstreamUnavailableError,
)
from events.service.registration import AlreadyRegisteredError, RegistrationError

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "stripe-signature"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Log an unexpected exception with its request metadata and answer 500."""
    logger.exception(
        "internal_server_error",
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
        query=obfuscate(request.GET.dict()),
        user=str(request.user) if getattr(request, "user", None) else None,
    )
    data = {"detail": "Internal Server Error."}
    is_staff = getattr(request, "user", None) and request.user.is_staff
    if settings.DEBUG or is_staff:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.warning("validation_error", path=request.path, error=str(exc))
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(exc.messages)}
    return Response(status=400, data={"errors": error_dict})


def handle_registration_error(request: HttpRequest, exc: RegistrationError | t.Type[RegistrationError]) -> Response:
    """Refused registrations carry the eligibility explaining what to do next."""
    status = 409 if isinstance(exc, AlreadyRegisteredError) else 400
    logger.info("registration_refused", path=request.path, reason=exc.eligibility.reason, status=status)
    return Response(status=status, data={"detail": str(exc), "eligibility": exc.eligibility.model_dump(mode="json")})


def handle_participant_not_found_error(
    request: HttpRequest, exc: ParticipantNotFoundError | t.Type[ParticipantNotFoundError]
) -> Response:
    """Handle an unknown participant."""
    return Response(status=404, data={"detail": str(exc)})


def handle_transaction_conflict_error(
    request: HttpRequest, exc: TransactionConflictError | t.Type[TransactionConflictError]
) -> Response:
    """Lost lock or serialization race; the client should retry."""
    return Response(status=409, data={"detail": str(exc), "retry": True})


def handle_invalid_signature_error(
    request: HttpRequest, exc: InvalidSignatureError | t.Type[InvalidSignatureError]
) -> Response:
    """Handle a webhook that failed signature verification."""
    return Response(status=400, data={"detail": str(exc)})


def handle_upstream_error(
    request: HttpRequest, exc: UpstreamUnavailableError | PaymentReconciliationError | t.Type[Exception]
) -> Response:
    """Payment processor failures. For webhooks, a 500 makes Stripe deliver the event again."""
    logger.error("upstream_error", path=request.path, error_type=type(exc).__name__, error=str(exc))
    return Response(status=500, data={"detail": str(exc)})


def handle_artifact_access_denied_error(
    request: HttpRequest, exc: ArtifactAccessDeniedError | t.Type[ArtifactAccessDeniedError]
) -> Response:
    """Handle a denied storage key."""
    return Response(status=403, data={"detail": str(exc), "reason": exc.reason})
