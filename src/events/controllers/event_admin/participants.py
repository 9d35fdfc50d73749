from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route

from accounts.service import profile_store
from common.auth_base import AdminJWTAuth
from common.throttling import WriteThrottle
from events import models, schema
from events.service import event_service
from events.service.registration import RegistrationManager, RemovalResult
from waivers import service as waiver_service
from waivers.models import Waiver

from .base import EventAdminBaseController


@api_controller("/event-admin/{uuid:event_id}", auth=AdminJWTAuth(), tags=["Event Admin"])
class EventAdminParticipantsController(EventAdminBaseController):
    """Roster, waiver and contact management of a single event."""

    @route.get("/participants", url_name="list_participants", response=list[schema.RosterEntrySchema])
    def list_participants(self, event_id: UUID) -> QuerySet[models.RosterEntry]:
        """Everyone on the roster, adults and children, with their waiver status."""
        return event_service.list_participants(self.get_one(event_id))

    @route.post(
        "/participants/remove",
        url_name="remove_participant",
        response={200: RemovalResult},
        throttle=WriteThrottle(),
    )
    def remove_participant(self, event_id: UUID, payload: schema.ParticipantRemoveSchema) -> RemovalResult:
        """Remove one participant from the roster, together with their signed waivers.

        Removing someone who is not registered succeeds with removed=false.
        """
        event = self.get_one(event_id)
        return RegistrationManager(self.request_context(), event).remove_participant(
            profile_store.ref_for(payload.participant_id, payload.is_child)
        )

    @route.get("/emails", url_name="event_contact_emails", response=schema.ContactEmailsSchema)
    def contact_emails(self, event_id: UUID) -> schema.ContactEmailsSchema:
        """Distinct contact emails of registered adults and parents of registered children."""
        event = self.get_one(event_id)
        return schema.ContactEmailsSchema(event_id=event.pk, emails=event_service.contact_emails(event))

    @route.post(
        "/waivers",
        url_name="attach_waiver_template",
        response={201: schema.WaiverTemplateSchema},
        throttle=WriteThrottle(),
    )
    def attach_waiver_template(
        self, event_id: UUID, payload: schema.WaiverTemplateCreateSchema
    ) -> tuple[int, Waiver]:
        """Require a new waiver template for the event. Upload the PDF first (kind=waiver_template)."""
        event = self.get_one(event_id)
        return 201, event_service.attach_waiver_template(event, self.user(), payload)

    @route.delete(
        "/waivers/{uuid:template_id}",
        url_name="detach_waiver_template",
        response={204: None},
        throttle=WriteThrottle(),
    )
    def detach_waiver_template(self, event_id: UUID, template_id: UUID) -> tuple[int, None]:
        """Stop requiring a waiver template. Signed copies are kept."""
        event = self.get_one(event_id)
        template = get_object_or_404(event.required_waivers.all(), pk=template_id)
        event_service.detach_waiver_template(event, template)
        return 204, None

    @route.get(
        "/waivers/completed",
        url_name="list_completed_waivers",
        response=list[schema.CompletedWaiverSchema],
    )
    def list_completed_waivers(
        self, event_id: UUID, user_id: UUID | None = None, child_id: UUID | None = None
    ) -> QuerySet[Waiver]:
        """Signed waivers of the event, optionally for one account or one child."""
        event = self.get_one(event_id)
        return waiver_service.list_completed(event.pk, user_id=user_id, child_id=child_id)
