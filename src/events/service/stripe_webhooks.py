"""Stripe webhook event handlers."""

import typing as t

import stripe
import structlog
from django.core.exceptions import ValidationError

from accounts.exceptions import ParticipantNotFoundError
from common.auth_base import PermissionDenied
from common.context import RequestContext
from events.exceptions import PaymentReconciliationError, TransactionConflictError
from events.models import Event
from events.service.checkout_service import decode_participants
from events.service.registration import CapacityExceededError, CheckoutIntent, RegistrationManager

logger = structlog.get_logger(__name__)

SETTLED_PAYMENT_STATUSES = {"paid", "no_payment_required"}


def parse_checkout_intent(metadata: t.Mapping[str, t.Any]) -> CheckoutIntent:
    """Read the checkout intent written into the session metadata at checkout time.

    Raises:
        ValueError: the metadata is missing or malformed.
    """
    try:
        return CheckoutIntent(
            event_id=metadata["event_id"],
            payer_id=metadata["payer_id"],
            participants=decode_participants(metadata),
            origin=metadata.get("origin", ""),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed checkout metadata: {e}") from e


class StripeEventHandler:
    """Handles the business logic for different types of Stripe webhook events."""

    def __init__(self, event: stripe.Event):
        """Initialize the Stripe event handler."""
        self.event = event

    def handle(self) -> None:
        """Routes the event to the appropriate handler based on its type."""
        event_type = self.event.type
        handler_method = getattr(self, f"handle_{event_type.replace('.', '_')}", self.handle_unknown_event)
        handler_method(self.event)

    def handle_unknown_event(self, event: stripe.Event) -> None:
        """Log unhandled event types for future development."""
        logger.info("stripe_webhook_unhandled_event", event_type=event.type, event_id=event.id)

    def handle_checkout_session_completed(self, event: stripe.Event) -> None:
        """Commit the paid registration of a completed checkout session.

        Sessions whose payment is still pending (delayed payment methods) are
        acknowledged and left to ``checkout.session.async_payment_succeeded``.
        """
        session = event.data.object
        session_id = session["id"]

        if session["payment_status"] not in SETTLED_PAYMENT_STATUSES:
            logger.warning(
                "stripe_session_unresolved_payment",
                session_id=session_id,
                payment_status=session["payment_status"],
            )
            return

        try:
            intent = parse_checkout_intent(session.get("metadata") or {})
        except ValueError as e:
            logger.error("stripe_session_invalid_metadata", session_id=session_id, error=str(e))
            raise PaymentReconciliationError(str(e), session_id) from e

        try:
            db_event = Event.objects.get(pk=intent.event_id)
        except Event.DoesNotExist as e:
            logger.error("stripe_session_unknown_event", session_id=session_id, event_id=str(intent.event_id))
            raise PaymentReconciliationError("Paid event no longer exists.", session_id) from e

        try:
            entries = RegistrationManager(RequestContext.system(), db_event).confirm_payment(
                intent,
                session_id=session_id,
                amount=session.get("amount_total") or 0,
                currency=(session.get("currency") or db_event.currency).upper(),
                payment_intent_id=session.get("payment_intent"),
                raw_response=dict(event),
            )
        except (
            CapacityExceededError,
            ParticipantNotFoundError,
            PermissionDenied,
            TransactionConflictError,
            ValidationError,
        ) as e:
            logger.error(
                "stripe_payment_reconciliation_failed",
                session_id=session_id,
                event_id=str(intent.event_id),
                error_type=type(e).__name__,
                error=str(e),
            )
            raise PaymentReconciliationError(str(e), session_id) from e

        logger.info(
            "stripe_payment_success",
            session_id=session_id,
            event_id=str(intent.event_id),
            registered=len(entries),
            amount=session.get("amount_total"),
        )

    def handle_checkout_session_async_payment_succeeded(self, event: stripe.Event) -> None:
        """Delayed payment methods confirm here instead of on completion."""
        self.handle_checkout_session_completed(event)
