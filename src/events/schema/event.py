"""Event-related schemas."""

import typing as t
from uuid import UUID

from django.conf import settings
from django.utils.translation import gettext as _
from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field, StringConstraints, model_validator

from common.schema import OneToTwoFiftyFiveString, StrippedString
from events.models import Event

from .waiver import WaiverTemplateSchema

CurrencyCode = t.Annotated[str, StringConstraints(min_length=3, max_length=3, to_upper=True, strip_whitespace=True)]


class _EventDatesMixin(Schema):
    start: AwareDatetime | None = None
    end: AwareDatetime | None = None
    registration_deadline: AwareDatetime | None = None

    @model_validator(mode="after")
    def validate_dates(self) -> t.Self:
        if self.start and self.end and self.start >= self.end:
            raise ValueError(_("Event end must be after its start."))
        if self.registration_deadline and self.end and self.registration_deadline > self.end:
            raise ValueError(_("Registration must close before the event ends."))
        return self


class EventCreateSchema(_EventDatesMixin):
    title: OneToTwoFiftyFiveString
    description: StrippedString = ""
    location: StrippedString = ""
    start: AwareDatetime
    end: AwareDatetime
    registration_deadline: AwareDatetime
    capacity: int = Field(0, ge=0, description="0 means unlimited")
    fee: int = Field(0, ge=0, description="Per participant, in minor currency units")
    currency: CurrencyCode = Field(default_factory=lambda: settings.DEFAULT_CURRENCY)
    payment_note: StrippedString = ""
    is_draft: bool = True


class EventUpdateSchema(_EventDatesMixin):
    title: OneToTwoFiftyFiveString | None = None
    description: StrippedString | None = None
    location: StrippedString | None = None
    capacity: int | None = Field(None, ge=0)
    fee: int | None = Field(None, ge=0)
    currency: CurrencyCode | None = None
    payment_note: StrippedString | None = None
    is_draft: bool | None = None
    image_keys: list[str] | None = Field(None, description="Keys previously uploaded under event-images/<id>/")


class EventInListSchema(ModelSchema):
    id: UUID
    participant_count: int = 0
    is_free: bool
    registration_open: bool

    class Meta:
        model = Event
        fields = [
            "title",
            "location",
            "start",
            "end",
            "registration_deadline",
            "capacity",
            "fee",
            "currency",
            "is_draft",
        ]

    @staticmethod
    def resolve_participant_count(obj: Event) -> int:
        count = getattr(obj, "participant_count", None)
        return count if count is not None else obj.roster.count()  # type: ignore[attr-defined]

    @staticmethod
    def resolve_registration_open(obj: Event) -> bool:
        return obj.registration_open()


class EventDetailSchema(EventInListSchema):
    required_waivers: list[WaiverTemplateSchema]

    class Meta:
        model = Event
        fields = [
            "title",
            "description",
            "location",
            "start",
            "end",
            "registration_deadline",
            "capacity",
            "fee",
            "currency",
            "payment_note",
            "is_draft",
            "image_keys",
        ]
