from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI
from ninja_jwt.controller import NinjaJWTDefaultController

from accounts.controllers.account import AccountController
from accounts.exceptions import ParticipantNotFoundError
from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.event_admin import EVENT_ADMIN_CONTROLLERS
from events.controllers.event_public import EVENT_PUBLIC_CONTROLLERS
from events.controllers.media import MediaController
from events.controllers.stripe_webhook import StripeWebhookController
from events.exceptions import (
    ArtifactAccessDeniedError,
    InvalidSignatureError,
    PaymentReconciliationError,
    TransactionConflictError,
    UpstreamUnavailableError,
)
from events.service.registration import RegistrationError

from .exception_handlers import (
    handle_artifact_access_denied_error,
    handle_django_validation_error,
    handle_general_exception,
    handle_invalid_signature_error,
    handle_participant_not_found_error,
    handle_registration_error,
    handle_transaction_conflict_error,
    handle_upstream_error,
)

api = NinjaExtraAPI(
    title=f"{settings.SITE_NAME} API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"{settings.SITE_NAME} API {settings.VERSION}",
    app_name=f"registrar-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    # Auth/Account controllers
    NinjaJWTDefaultController,
    AccountController,
    # Event controllers
    *EVENT_PUBLIC_CONTROLLERS,
    *EVENT_ADMIN_CONTROLLERS,
    MediaController,
    StripeWebhookController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    RegistrationError: handle_registration_error,
    ParticipantNotFoundError: handle_participant_not_found_error,
    TransactionConflictError: handle_transaction_conflict_error,
    InvalidSignatureError: handle_invalid_signature_error,
    UpstreamUnavailableError: handle_upstream_error,
    PaymentReconciliationError: handle_upstream_error,
    ArtifactAccessDeniedError: handle_artifact_access_denied_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
