from datetime import datetime
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from events.models import Event, RosterEntry
from events.service.registration import ParticipantSelection, RegistrationEligibility


class JoinRequestSchema(Schema):
    participants: list[ParticipantSelection] = Field(..., min_length=1)


class ParticipantRemoveSchema(Schema):
    participant_id: UUID
    is_child: bool = False


class EligibilityErrorSchema(Schema):
    detail: str
    eligibility: RegistrationEligibility


class RosterEntrySchema(ModelSchema):
    id: UUID
    user_id: UUID
    child_id: UUID | None = None
    is_child: bool
    participant_name: str
    email: str
    all_waivers_signed: bool

    class Meta:
        model = RosterEntry
        fields = ["waiver_status", "created_at"]

    @staticmethod
    def resolve_participant_name(obj: RosterEntry) -> str:
        return obj.participant_name()

    @staticmethod
    def resolve_email(obj: RosterEntry) -> str:
        return obj.user.email


class ContactEmailsSchema(Schema):
    event_id: UUID
    emails: list[str]


class RegisteredEventSchema(ModelSchema):
    """An event the caller or one of their children is registered for."""

    id: UUID
    participants: list[str] = Field(default_factory=list)
    registered_at: datetime | None = None

    class Meta:
        model = Event
        fields = ["title", "location", "start", "end", "is_draft"]
