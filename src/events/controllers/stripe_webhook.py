import stripe
import structlog
from django.conf import settings
from django.http import HttpRequest
from ninja_extra import api_controller, route

from events.exceptions import InvalidSignatureError
from events.service import stripe_webhooks

logger = structlog.get_logger(__name__)


@api_controller("/stripe", auth=None, tags=["Stripe"])
class StripeWebhookController:
    @route.post("/webhook", response={200: None}, url_name="stripe_webhook")
    def handle_webhook(self, request: HttpRequest) -> tuple[int, None]:
        """Handle incoming Stripe webhooks.

        Unverified payloads are rejected without being looked at. A payment that
        cannot be committed answers 500 so that Stripe delivers it again.
        """
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")
        if not sig_header:
            logger.warning("stripe_webhook_missing_signature", remote_addr=request.META.get("REMOTE_ADDR"))
            raise InvalidSignatureError("Missing Stripe signature")
        try:
            event = stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(
                "stripe_webhook_invalid_signature",
                remote_addr=request.META.get("REMOTE_ADDR"),
                error=str(e),
            )
            raise InvalidSignatureError("Invalid Stripe signature") from e

        stripe_webhooks.StripeEventHandler(event).handle()

        return 200, None
