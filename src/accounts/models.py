import typing as t
import uuid

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models
from django.db.models import Q

from accounts.validators import normalize_phone_number, validate_phone_number, validate_zip_code
from common.models import TimeStampedModel


class Gender(models.TextChoices):
    MALE = "male", "Male"
    FEMALE = "female", "Female"
    NON_BINARY = "non_binary", "Non-binary"
    UNDISCLOSED = "undisclosed", "Prefer not to say"


class ProfileMixin(models.Model):
    """Personal and medical fields shared by account holders and their children."""

    gender = models.CharField(max_length=16, choices=Gender.choices, blank=True)
    birthday = models.DateField(null=True, blank=True)
    image_key = models.CharField(max_length=512, blank=True, help_text="Storage key of the profile picture")

    # None means the participant has not decided yet; False is a valid decision.
    photo_release = models.BooleanField(null=True, blank=True)
    allergies = models.TextField(blank=True)
    insurance = models.CharField(max_length=255, blank=True)
    doctor_name = models.CharField(max_length=255, blank=True)
    doctor_phone = models.CharField(max_length=32, blank=True)
    behavior_notes = models.TextField(blank=True)
    dietary_restrictions = models.TextField(blank=True)
    other_notes = models.TextField(blank=True)

    class Meta:
        abstract = True


class UserQueryset(models.QuerySet["User"]):
    """Queryset for User."""

    def privileged(self) -> "UserQueryset":
        return self.filter(Q(is_staff=True) | Q(is_superuser=True))


class AccountManager(UserManager["User"]):
    def get_queryset(self) -> UserQueryset:
        """Get queryset for User."""
        return UserQueryset(self.model)


class User(ProfileMixin, AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    address_home = models.CharField(max_length=255, blank=True)
    address_city = models.CharField(max_length=128, blank=True)
    address_zip_code = models.CharField(max_length=10, blank=True, validators=[validate_zip_code])

    phone_cell = models.CharField(max_length=20, blank=True, validators=[validate_phone_number])
    phone_work = models.CharField(max_length=20, blank=True, validators=[validate_phone_number])

    registered_events = models.ManyToManyField("events.Event", related_name="+", blank=True)

    objects = AccountManager()  # type: ignore[misc]

    class Meta:
        ordering = ["username"]

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Normalize phone numbers before saving."""
        if self.phone_cell:
            self.phone_cell = normalize_phone_number(self.phone_cell)
        if self.phone_work:
            self.phone_work = normalize_phone_number(self.phone_work)
        super().save(*args, **kwargs)

    @property
    def is_privileged(self) -> bool:
        return bool(self.is_staff or self.is_superuser)

    def get_display_name(self) -> str:
        """Returns the user's full name, falling back to the username."""
        return self.get_full_name() or self.username


class Child(ProfileMixin, TimeStampedModel):
    parent = models.ForeignKey(User, on_delete=models.CASCADE, related_name="children")
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)

    registered_events = models.ManyToManyField("events.Event", related_name="+", blank=True)

    class Meta:
        ordering = ["first_name", "last_name"]
        verbose_name_plural = "children"

    def __str__(self) -> str:
        return self.get_full_name()

    def get_full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class EmergencyContact(TimeStampedModel):
    """An emergency contact of exactly one adult or one child."""

    user = models.ForeignKey(
        User, on_delete=models.CASCADE, null=True, blank=True, related_name="emergency_contacts"
    )
    child = models.ForeignKey(
        Child, on_delete=models.CASCADE, null=True, blank=True, related_name="emergency_contacts"
    )
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, validators=[validate_phone_number])
    work_phone = models.CharField(max_length=20, blank=True, validators=[validate_phone_number])
    relationship = models.CharField(max_length=64)
    can_pickup = models.BooleanField(default=False)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(Q(user__isnull=False) & Q(child__isnull=True))
                | (Q(user__isnull=True) & Q(child__isnull=False)),
                name="emergency_contact_exactly_one_owner",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.relationship})"

    @property
    def is_complete(self) -> bool:
        return bool(self.name and self.phone and self.relationship)
