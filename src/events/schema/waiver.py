from uuid import UUID

from ninja import ModelSchema, Schema

from common.schema import OneToTwoFiftyFiveString
from waivers.models import Waiver


class WaiverTemplateSchema(ModelSchema):
    id: UUID

    class Meta:
        model = Waiver
        fields = ["file_key", "file_name", "uploaded_at"]


class WaiverTemplateCreateSchema(Schema):
    file_key: OneToTwoFiftyFiveString
    file_name: OneToTwoFiftyFiveString


class WaiverSignSchema(Schema):
    """A signed copy of a template, already uploaded under waivers/completed/."""

    participant_id: UUID
    is_child: bool = False
    file_key: OneToTwoFiftyFiveString
    file_name: OneToTwoFiftyFiveString


class CompletedWaiverSchema(ModelSchema):
    id: UUID
    event_id: UUID | None
    template_id: UUID | None
    belongs_to_user_id: UUID
    child_id: UUID | None = None
    participant_name: str

    class Meta:
        model = Waiver
        fields = ["file_key", "file_name", "is_for_child", "uploaded_at"]

    @staticmethod
    def resolve_participant_name(obj: Waiver) -> str:
        participant = obj.child if obj.child_id else obj.belongs_to_user
        return participant.get_full_name() if participant else ""
