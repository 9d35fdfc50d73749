from ninja import Schema
from pydantic import Field

from events.service.registration import ParticipantSelection


class CheckoutRequestSchema(Schema):
    participants: list[ParticipantSelection] = Field(..., min_length=1)
    origin: str | None = Field(None, description="Frontend origin to return to after payment")


class CheckoutSessionSchema(Schema):
    session_id: str
    session_url: str
    amount: int
    currency: str
