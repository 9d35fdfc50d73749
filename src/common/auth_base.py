"""Base authentication classes for the Registrar API."""

import typing as t

from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _
from ninja_extra import status
from ninja_extra.exceptions import APIException
from ninja_jwt.authentication import JWTAuth


class PermissionDenied(APIException):
    """Exception raised when user doesn't have required permissions."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Permission denied")


class BaseJWTAuth(JWTAuth):
    """JWT authentication that can additionally require administrative rights.

    A user is privileged when they are staff or superuser.
    """

    def __init__(self, *, is_privileged: bool = False) -> None:
        """Initialize the BaseJWTAuth authentication class.

        Args:
            is_privileged: Whether the endpoint requires a privileged actor.
        """
        self.is_privileged = is_privileged
        super().__init__()

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate and verify user permissions.

        Raises:
            PermissionDenied: If the user is not privileged but the endpoint requires it.
        """
        user = super().authenticate(request, token)

        if user and not isinstance(user, AnonymousUser):
            if self.is_privileged and not (user.is_staff or user.is_superuser):
                raise PermissionDenied(str(_("Administrator access required.")))

        return user


class AdminJWTAuth(BaseJWTAuth):
    """Shortcut for endpoints restricted to privileged actors."""

    def __init__(self) -> None:
        """Require a privileged actor."""
        super().__init__(is_privileged=True)
