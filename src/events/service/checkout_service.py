"""Stripe Checkout for paid admission.

A checkout never touches the roster: the participants, the payer and the event
travel in the session metadata, and the roster is committed once the webhook
confirms the payment.
"""

import typing as t
import uuid

import stripe
import structlog
from django.conf import settings
from pydantic import BaseModel
from stripe.checkout import Session

from common.context import RequestContext
from events.exceptions import UpstreamUnavailableError
from events.models import Event
from events.service.registration import (
    EligibilityService,
    NothingToPurchaseError,
    ParticipantSelection,
    RegistrationManager,
)

logger = structlog.get_logger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY


# Stripe rejects metadata values longer than this.
METADATA_VALUE_LIMIT = 500
PARTICIPANTS_KEY = "participants"


def _participants_key(index: int) -> str:
    return PARTICIPANTS_KEY if index == 0 else f"{PARTICIPANTS_KEY}_{index}"


def encode_participants(participants: t.Sequence[ParticipantSelection]) -> dict[str, str]:
    """Pack participants into session metadata values.

    Each participant is written as ``a<hex>`` (adult) or ``c<hex>`` (child), comma
    separated, and spread over ``participants``, ``participants_1``, ... so that no
    value exceeds the metadata value limit.
    """
    chunks: list[str] = []
    for p in participants:
        token = f"{'c' if p.is_child else 'a'}{p.participant_id.hex}"
        if chunks and len(chunks[-1]) + 1 + len(token) <= METADATA_VALUE_LIMIT:
            chunks[-1] = f"{chunks[-1]},{token}"
        else:
            chunks.append(token)
    return {_participants_key(i): chunk for i, chunk in enumerate(chunks)}


def decode_participants(metadata: t.Mapping[str, t.Any]) -> list[ParticipantSelection]:
    """Read back the participants written by :func:`encode_participants`.

    Raises:
        KeyError: no participants in the metadata.
        ValueError: a participant token is malformed.
    """
    values = [metadata[PARTICIPANTS_KEY]]
    index = 1
    while metadata.get(_participants_key(index)):
        values.append(metadata[_participants_key(index)])
        index += 1
    selections = []
    for token in ",".join(values).split(","):
        kind, hex_id = token[:1], token[1:]
        if kind not in ("a", "c"):
            raise ValueError(f"Unknown participant kind in {token!r}")
        selections.append(ParticipantSelection(participant_id=uuid.UUID(hex=hex_id), is_child=kind == "c"))
    return selections


class CheckoutSession(BaseModel):
    session_id: str
    session_url: str
    amount: int
    currency: str


def resolve_origin(origin: str | None) -> str:
    """Return the requested origin when it is allowed, else the frontend base URL."""
    allowed = [o.rstrip("/") for o in settings.CHECKOUT_ALLOWED_ORIGINS]
    if origin and origin.rstrip("/") in allowed:
        return origin.rstrip("/")
    if origin:
        logger.warning("checkout_origin_rejected", origin=origin)
    return t.cast(str, settings.FRONTEND_BASE_URL).rstrip("/")


def _create_stripe_checkout_session(
    event: Event, payer_id: str, participants: list[ParticipantSelection], origin: str
) -> Session:
    """Create a Stripe Checkout Session.

    Raises:
        UpstreamUnavailableError: If the Stripe API call fails.
    """
    session_data = dict(  # noqa: C408
        mode="payment",
        line_items=[
            {
                "price_data": {
                    "currency": event.currency.lower(),
                    "product_data": {"name": event.title},
                    "unit_amount": event.fee,
                },
                "quantity": len(participants),
            }
        ],
        success_url=f"{origin}/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=origin,
        client_reference_id=payer_id,
        metadata={
            "event_id": str(event.pk),
            "payer_id": payer_id,
            "origin": origin,
            **encode_participants(participants),
        },
    )
    try:
        return Session.create(**session_data)  # type: ignore[arg-type]
    except stripe.StripeError as e:
        logger.error("stripe_checkout_session_failed", event_id=str(event.pk), error=str(e))
        raise UpstreamUnavailableError(f"Stripe API error: {e}") from e


def initiate_checkout(
    context: RequestContext,
    event: Event,
    selections: t.Sequence[ParticipantSelection],
    origin: str | None = None,
) -> CheckoutSession:
    """Start paying for the admission of the selected participants.

    The same preconditions as a free join apply. Nothing is written locally.

    Raises:
        NothingToPurchaseError: the event is free.
        RegistrationError subclasses when a gate blocks.
        UpstreamUnavailableError: Stripe is unavailable.
    """
    if event.is_free:
        raise NothingToPurchaseError.build(event.pk)
    manager = RegistrationManager(context, event)
    refs = manager.resolve(selections)
    EligibilityService(context, event, refs).assert_eligible()

    participants = [ParticipantSelection(participant_id=r.participant_id, is_child=r.is_child) for r in refs]
    safe_origin = resolve_origin(origin)
    session = _create_stripe_checkout_session(event, str(context.actor_id), participants, safe_origin)
    amount = event.fee * len(participants)
    logger.info(
        "checkout_session_created",
        event_id=str(event.pk),
        session_id=session.id,
        participant_count=len(participants),
        amount=amount,
    )
    return CheckoutSession(
        session_id=session.id,
        session_url=t.cast(str, session.url),
        amount=amount,
        currency=event.currency,
    )
