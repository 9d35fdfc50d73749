"""Schema for accounts module."""

import datetime

from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field, field_validator

from accounts.models import Child, EmergencyContact, Gender, User
from accounts.validators import ZIP_CODE_REGEX
from common.schema import OneToOneFiftyString, StrippedString

MEDICAL_FIELDS = [
    "photo_release",
    "allergies",
    "insurance",
    "doctor_name",
    "doctor_phone",
    "behavior_notes",
    "dietary_restrictions",
    "other_notes",
]


class EmergencyContactSchema(ModelSchema):
    class Meta:
        model = EmergencyContact
        fields = ["id", "name", "phone", "work_phone", "relationship", "can_pickup"]


class EmergencyContactIn(Schema):
    name: OneToOneFiftyString
    phone: StrippedString
    work_phone: StrippedString = ""
    relationship: OneToOneFiftyString
    can_pickup: bool = False


class ChildSchema(ModelSchema):
    id: UUID4
    emergency_contacts: list[EmergencyContactSchema]

    class Meta:
        model = Child
        fields = ["first_name", "last_name", "gender", "birthday", "image_key", *MEDICAL_FIELDS]


class UserSchema(ModelSchema):
    id: UUID4
    is_privileged: bool
    emergency_contacts: list[EmergencyContactSchema]
    children: list[ChildSchema]

    class Meta:
        model = User
        fields = [
            "username",
            "email",
            "first_name",
            "last_name",
            "gender",
            "birthday",
            "address_home",
            "address_city",
            "address_zip_code",
            "phone_cell",
            "phone_work",
            "image_key",
            *MEDICAL_FIELDS,
        ]


class MinimalUserSchema(ModelSchema):
    id: UUID4

    class Meta:
        model = User
        fields = ["first_name", "last_name", "email"]


class MedicalInfoMixin(Schema):
    photo_release: bool | None = None
    allergies: StrippedString | None = None
    insurance: StrippedString | None = None
    doctor_name: StrippedString | None = None
    doctor_phone: StrippedString | None = None
    behavior_notes: StrippedString | None = None
    dietary_restrictions: StrippedString | None = None
    other_notes: StrippedString | None = None


class ProfileUpdateSchema(MedicalInfoMixin):
    """Partial update of the caller's profile. Omitted fields are left untouched.

    ``emergency_contacts``, when given, replaces the existing list.
    """

    first_name: OneToOneFiftyString | None = None
    last_name: OneToOneFiftyString | None = None
    email: EmailStr | None = None
    gender: Gender | None = None
    birthday: datetime.date | None = None
    address_home: StrippedString | None = None
    address_city: StrippedString | None = None
    address_zip_code: StrippedString | None = None
    phone_cell: StrippedString | None = None
    phone_work: StrippedString | None = None
    image_key: StrippedString | None = None
    emergency_contacts: list[EmergencyContactIn] | None = None

    @field_validator("address_zip_code")
    @classmethod
    def validate_zip(cls, value: str | None) -> str | None:
        if value and not ZIP_CODE_REGEX.fullmatch(value):
            raise ValueError("Zip code must be 5 digits or ZIP+4 (12345-6789).")
        return value


class ChildCreateSchema(MedicalInfoMixin):
    first_name: OneToOneFiftyString
    last_name: OneToOneFiftyString
    gender: Gender | None = None
    birthday: datetime.date | None = None
    image_key: StrippedString | None = None
    emergency_contacts: list[EmergencyContactIn] = Field(default_factory=list)


class ChildUpdateSchema(MedicalInfoMixin):
    first_name: OneToOneFiftyString | None = None
    last_name: OneToOneFiftyString | None = None
    gender: Gender | None = None
    birthday: datetime.date | None = None
    image_key: StrippedString | None = None
    emergency_contacts: list[EmergencyContactIn] | None = None


class ParticipantStatusSchema(Schema):
    participant_id: UUID4
    is_child: bool
    name: str
    complete: bool
    missing_fields: list[str]


class ProfileStatusSchema(Schema):
    complete: bool
    participants: list[ParticipantStatusSchema]
