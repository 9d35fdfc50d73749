from uuid import UUID

from ninja_extra import api_controller, route

from common.auth_base import BaseJWTAuth
from common.authentication import OptionalAuth
from events import models, schema
from events.service import waiver_signing
from events.service.registration import ParticipantRegistrationStatus, RegistrationManager

from waivers.models import Waiver

from .base import EventPublicBaseController


@api_controller("/events", auth=OptionalAuth(), tags=["Events"])
class EventPublicDetailsController(EventPublicBaseController):
    @route.get("/{uuid:event_id}", url_name="get_event", response=schema.EventDetailSchema)
    def get_event(self, event_id: UUID) -> models.Event:
        """Retrieve event details, including the waivers participants must sign."""
        return self.get_one(event_id)

    @route.get(
        "/{uuid:event_id}/my-status",
        url_name="get_my_event_status",
        response=list[ParticipantRegistrationStatus],
        auth=BaseJWTAuth(),
    )
    def get_my_event_status(self, event_id: UUID) -> list[ParticipantRegistrationStatus]:
        """Registration and waiver status of the caller and of each of their children.

        Use this to decide which action to offer per participant: complete the profile,
        join, pay, or sign the pending waivers.
        """
        event = self.get_one(event_id)
        return RegistrationManager(self.request_context(), event).participant_statuses(self.user())

    @route.get(
        "/{uuid:event_id}/waivers",
        url_name="list_event_waivers",
        response=list[schema.WaiverTemplateSchema],
        auth=BaseJWTAuth(),
    )
    def list_event_waivers(self, event_id: UUID) -> list[Waiver]:
        """Waiver templates required by the event. Download them via /media/presigned-download."""
        return waiver_signing.required_templates(self.get_one(event_id))
