"""Request-scoped caller identity passed into service calls."""

import typing as t
import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Who is acting, and whether they hold administrative rights.

    Built once per request from the authenticated user and handed explicitly to
    every service that makes an authorization decision.
    """

    actor_id: uuid.UUID | None
    is_privileged: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.actor_id is not None

    @classmethod
    def from_user(cls, user: t.Any) -> "RequestContext":
        """Build a context from a Django user (or AnonymousUser / None)."""
        if user is None or not getattr(user, "is_authenticated", False):
            return cls(actor_id=None)
        return cls(actor_id=user.pk, is_privileged=bool(user.is_staff or user.is_superuser))

    @classmethod
    def system(cls) -> "RequestContext":
        """Context for trusted server-side callers such as the payment webhook."""
        return cls(actor_id=None, is_privileged=True)
