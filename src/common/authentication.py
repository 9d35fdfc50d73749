import typing as t

import structlog
from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from ninja_jwt.authentication import JWTAuth

logger = structlog.get_logger(__name__)


class OptionalAuth(JWTAuth):
    """Optional JWT authentication.

    - If a bearer token is present: authenticates the user as usual.
    - If no token is present: sets request.user to AnonymousUser and continues.

    Used by public endpoints whose answer depends on who is asking
    (e.g. draft events are visible to registered participants only).
    """

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Overrides JWTAuth __call__ to provide optional auth."""
        auth_value = request.headers.get(self.header)
        if not auth_value:
            request.user = AnonymousUser()
            return request.user
        parts = auth_value.split(" ")

        if parts[0].lower() != self.openapi_scheme:
            if settings.DEBUG:
                logger.error("unexpected_auth_scheme", auth_scheme=parts[0])
            return None
        token = " ".join(parts[1:])
        return self.authenticate(request, token)
