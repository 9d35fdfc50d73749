from uuid import UUID

from ninja_extra import api_controller, route

from common.auth_base import AdminJWTAuth
from common.schema import ValidationErrorResponse
from common.throttling import WriteThrottle
from events import models, schema
from events.service import event_service

from .base import EventAdminBaseController


@api_controller("/event-admin", auth=AdminJWTAuth(), tags=["Event Admin"], throttle=WriteThrottle())
class EventAdminCoreController(EventAdminBaseController):
    """Event CRUD for administrators."""

    @route.post(
        "",
        url_name="create_event",
        response={201: schema.EventDetailSchema, 400: ValidationErrorResponse},
    )
    def create_event(self, payload: schema.EventCreateSchema) -> tuple[int, models.Event]:
        """Create an event. Events are drafts until is_draft is set to false."""
        return 201, event_service.create_event(self.user(), payload)

    @route.put(
        "/{uuid:event_id}",
        url_name="edit_event",
        response={200: schema.EventDetailSchema, 400: ValidationErrorResponse},
    )
    def update_event(self, event_id: UUID, payload: schema.EventUpdateSchema) -> models.Event:
        """Update event by ID. Only the fields sent are changed.

        image_keys must reference uploads under event-images/<event_id>/.
        """
        event = self.get_one(event_id)
        return event_service.update_event(event, payload)

    @route.delete("/{uuid:event_id}", url_name="delete_event", response={204: None})
    def delete_event(self, event_id: UUID) -> tuple[int, None]:
        """Delete event by ID, with its roster, its waivers and their stored files."""
        event = self.get_one(event_id)
        event_service.delete_event(event)
        return 204, None
