import typing as t

import structlog
from django.contrib.auth.models import AnonymousUser
from ninja_extra import ControllerBase

from accounts.models import User
from common.context import RequestContext


class UserAwareController(ControllerBase):
    def maybe_user(self) -> User | AnonymousUser:
        """Get the user for this request."""
        return t.cast(User | AnonymousUser, self.context.request.user)  # type: ignore[union-attr]

    def user(self) -> User:
        """Get the user for this request."""
        return t.cast(User, self.context.request.user)  # type: ignore[union-attr]

    def request_context(self) -> RequestContext:
        """Caller identity for service calls.

        JWT users are resolved after the middleware ran, so the user id is bound
        to the log context here.
        """
        user = self.maybe_user()
        if user.is_authenticated:
            structlog.contextvars.bind_contextvars(user_id=str(user.pk))
        return RequestContext.from_user(user)
