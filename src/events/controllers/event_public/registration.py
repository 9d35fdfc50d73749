from uuid import UUID

from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route

from common.auth_base import BaseJWTAuth
from common.throttling import RegistrationThrottle, WriteThrottle
from events import schema
from events.service import checkout_service, waiver_signing
from events.service.registration import (
    ParticipantSelection,
    RegistrationManager,
    RegistrationResult,
    RemovalResult,
)
from waivers.models import Waiver

from .base import EventPublicBaseController


@api_controller("/events", auth=BaseJWTAuth(), tags=["Registration"])
class EventPublicRegistrationController(EventPublicBaseController):
    """Joining, paying for, leaving events and signing their waivers."""

    @route.post(
        "/{uuid:event_id}/join",
        url_name="join_event",
        response={200: RegistrationResult, 400: schema.EligibilityErrorSchema, 409: schema.EligibilityErrorSchema},
        throttle=RegistrationThrottle(),
    )
    def join_event(self, event_id: UUID, payload: schema.JoinRequestSchema) -> RegistrationResult:
        """Register the caller and/or their children.

        Every participant needs a complete profile and the whole group must fit in the
        remaining capacity; otherwise nobody is registered. Free events return
        status=registered. Paid events return status=payment_required with the amount
        due and register nothing: continue with POST /{event_id}/checkout.
        """
        event = self.get_one(event_id)
        return RegistrationManager(self.request_context(), event).join(payload.participants)

    @route.post(
        "/{uuid:event_id}/checkout",
        url_name="checkout_event",
        response={200: schema.CheckoutSessionSchema, 400: schema.EligibilityErrorSchema},
        throttle=RegistrationThrottle(),
    )
    def checkout_event(
        self, event_id: UUID, payload: schema.CheckoutRequestSchema
    ) -> checkout_service.CheckoutSession:
        """Start a Stripe Checkout for a paid event.

        Redirect the browser to session_url. Participants are registered once Stripe
        confirms the payment; an abandoned checkout registers nobody.
        """
        event = self.get_one(event_id)
        return checkout_service.initiate_checkout(
            self.request_context(), event, payload.participants, origin=payload.origin
        )

    @route.post(
        "/{uuid:event_id}/unregister",
        url_name="unregister_event",
        response={200: list[RemovalResult], 400: schema.EligibilityErrorSchema},
        throttle=WriteThrottle(),
    )
    def unregister_event(self, event_id: UUID, payload: schema.JoinRequestSchema) -> list[RemovalResult]:
        """Withdraw the caller and/or their children from a free event, deleting their signed waivers."""
        event = self.get_one(event_id)
        return RegistrationManager(self.request_context(), event).unregister(payload.participants)

    @route.post(
        "/{uuid:event_id}/waivers/{uuid:template_id}/sign",
        url_name="sign_waiver",
        response={201: schema.CompletedWaiverSchema},
        throttle=WriteThrottle(),
    )
    def sign_waiver(self, event_id: UUID, template_id: UUID, payload: schema.WaiverSignSchema) -> tuple[int, Waiver]:
        """Submit the signed copy of a required waiver for a registered participant.

        Upload the PDF first via /media/presigned-upload (kind=waiver_completed).
        Signing a template again replaces the previous copy.
        """
        event = self.get_one(event_id)
        template = get_object_or_404(Waiver.objects.templates(), pk=template_id)
        waiver = waiver_signing.sign_waiver(
            self.request_context(),
            self.user(),
            event,
            template,
            ParticipantSelection(participant_id=payload.participant_id, is_child=payload.is_child),
            file_key=payload.file_key,
            file_name=payload.file_name,
        )
        return 201, waiver
