import typing as t
from uuid import UUID

from common.controllers import UserAwareController
from events import models


class EventPublicBaseController(UserAwareController):
    """Base controller for public event endpoints.

    Subclasses should be decorated with @api_controller to register routes.
    """

    def get_queryset(self) -> models.EventQuerySet:
        """Events visible to the caller."""
        return models.Event.objects.for_user(self.maybe_user())

    def get_one(self, event_id: UUID) -> models.Event:
        """Wrapper helper."""
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))
