import typing as t
from datetime import datetime

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from django.db.models import Count, Exists, OuterRef, Q
from django.utils import timezone

from accounts.models import User
from common.models import TimeStampedModel

EVENT_IMAGE_PREFIX = "event-images/"


class EventQuerySet(models.QuerySet["Event"]):
    def published(self) -> t.Self:
        return self.filter(is_draft=False)

    def with_participant_count(self) -> t.Self:
        return self.annotate(participant_count=Count("roster", distinct=True))

    def for_user(self, user: User | AnonymousUser) -> t.Self:
        """Events the user may see.

        Published events are public. Drafts are visible to privileged users and to
        accounts registered for them, directly or through a child.
        """
        if user.is_authenticated and (user.is_staff or user.is_superuser):
            return self.all()
        if not user.is_authenticated:
            return self.published()
        from .roster import RosterEntry

        registered = RosterEntry.objects.filter(event=OuterRef("pk"), user=user)
        return self.filter(Q(is_draft=False) | Exists(registered))


class Event(TimeStampedModel):
    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField()
    registration_deadline = models.DateTimeField()
    capacity = models.PositiveIntegerField(default=0, help_text="Maximum number of participants. 0 means unlimited.")
    fee = models.PositiveIntegerField(default=0, help_text="Admission fee per participant in minor currency units.")
    currency = models.CharField(max_length=3, default=settings.DEFAULT_CURRENCY)
    payment_note = models.TextField(blank=True)
    is_draft = models.BooleanField(default=True, db_index=True)
    image_keys = models.JSONField(default=list, blank=True)
    required_waivers = models.ManyToManyField(
        "waivers.Waiver",
        blank=True,
        related_name="required_by_events",
        limit_choices_to={"kind": "template"},
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="created_events"
    )

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["start"]

    def __str__(self) -> str:
        return self.title

    def clean(self) -> None:
        """Validate event dates and image keys."""
        errors: dict[str, str] = {}
        if self.start and self.end and self.start >= self.end:
            errors["end"] = "Event end must be after its start."
        if self.registration_deadline and self.end and self.registration_deadline > self.end:
            errors["registration_deadline"] = "Registration must close before the event ends."
        if not isinstance(self.image_keys, list) or any(
            not isinstance(key, str) or not key.startswith(self.image_prefix) for key in self.image_keys
        ):
            errors["image_keys"] = f"Event images must be stored under {self.image_prefix}."
        if errors:
            raise DjangoValidationError(errors)

    @property
    def image_prefix(self) -> str:
        return f"{EVENT_IMAGE_PREFIX}{self.pk}/"

    @property
    def is_free(self) -> bool:
        return self.fee == 0

    @property
    def has_capacity_limit(self) -> bool:
        return self.capacity > 0

    def registration_open(self, at: datetime | None = None) -> bool:
        return (at or timezone.now()) <= self.registration_deadline

    @property
    def registered_users(self) -> models.QuerySet[t.Any]:
        """Adult roster entries."""
        return self.roster.filter(child__isnull=True)  # type: ignore[attr-defined,no-any-return]

    @property
    def registered_children(self) -> models.QuerySet[t.Any]:
        """Child roster entries."""
        return self.roster.filter(child__isnull=False)  # type: ignore[attr-defined,no-any-return]
