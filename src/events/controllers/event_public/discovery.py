import typing as t

from django.db.models import QuerySet
from django.utils import timezone
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching

from common.auth_base import BaseJWTAuth
from common.authentication import OptionalAuth
from events import models, schema
from events.service import event_service

from .base import EventPublicBaseController


@api_controller("/events", auth=OptionalAuth(), tags=["Events"])
class EventPublicDiscoveryController(EventPublicBaseController):
    """Event listing and other non-event_id routes.

    Registered before the /{uuid:event_id} controllers so these paths match first.
    """

    @route.get("/", url_name="list_events", response=PaginatedResponseSchema[schema.EventInListSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(Searching, search_fields=["title", "description", "location"])
    def list_events(
        self,
        include_past: bool = False,
        order_by: t.Literal["start", "-start"] = "start",
    ) -> QuerySet[models.Event]:
        """Browse events visible to the caller.

        Anonymous callers see published events. Authenticated callers also see drafts
        they are registered for; administrators see everything. Past events are hidden
        unless include_past=true.
        """
        qs = self.get_queryset().with_participant_count()
        if not include_past:
            qs = qs.filter(end__gte=timezone.now())
        return qs.order_by(order_by)

    @route.get("/mine", url_name="my_events", response=list[schema.RegisteredEventSchema], auth=BaseJWTAuth())
    def my_events(self) -> list[schema.RegisteredEventSchema]:
        """Events the caller or any of their children is registered for, with who is registered."""
        return event_service.registered_events(self.user())
