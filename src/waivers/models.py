from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from common.models import TimeStampedModel

TEMPLATE_PREFIX = "waivers/templates/"
COMPLETED_PREFIX = "waivers/completed/"


class WaiverQuerySet(models.QuerySet["Waiver"]):
    def templates(self) -> "WaiverQuerySet":
        return self.filter(kind=Waiver.Kind.TEMPLATE)

    def completed(self) -> "WaiverQuerySet":
        return self.filter(kind=Waiver.Kind.COMPLETED)


class Waiver(TimeStampedModel):
    """A waiver document stored in the blob store.

    Templates are attached to events as required waivers; completed waivers are the
    signed copies of one template by one participant for one event.
    """

    class Kind(models.TextChoices):
        TEMPLATE = "template", "Template"
        COMPLETED = "completed", "Completed"

    kind = models.CharField(max_length=16, choices=Kind.choices, db_index=True)
    event = models.ForeignKey(
        "events.Event", on_delete=models.CASCADE, null=True, blank=True, related_name="waivers"
    )
    file_key = models.CharField(max_length=512, unique=True)
    file_name = models.CharField(max_length=255)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="uploaded_waivers"
    )
    # The adult, or the parent when the waiver is for a child.
    belongs_to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True, related_name="waivers"
    )
    child = models.ForeignKey(
        "accounts.Child", on_delete=models.CASCADE, null=True, blank=True, related_name="waivers"
    )
    is_for_child = models.BooleanField(default=False)
    template = models.ForeignKey(
        "self", on_delete=models.SET_NULL, null=True, blank=True, related_name="completed_copies"
    )
    uploaded_at = models.DateTimeField(default=timezone.now)

    objects = WaiverQuerySet.as_manager()

    class Meta:
        ordering = ["-uploaded_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(is_for_child=False, child__isnull=True) | Q(is_for_child=True, child__isnull=False),
                name="waiver_is_for_child_matches_child",
            ),
            models.UniqueConstraint(
                fields=["event", "template", "belongs_to_user"],
                condition=Q(kind="completed", child__isnull=True),
                name="unique_completed_waiver_per_adult",
            ),
            models.UniqueConstraint(
                fields=["event", "template", "child"],
                condition=Q(kind="completed", child__isnull=False),
                name="unique_completed_waiver_per_child",
            ),
        ]
        indexes = [
            models.Index(fields=["event", "belongs_to_user", "child"], name="ix_waiver_event_participant"),
        ]

    def __str__(self) -> str:
        return f"{self.get_kind_display()}: {self.file_name}"

    def clean(self) -> None:
        """Keep file keys under the folder of their kind and completed waivers fully scoped."""
        if self.kind == self.Kind.TEMPLATE:
            if not self.file_key.startswith(TEMPLATE_PREFIX):
                raise ValidationError({"file_key": f"Template waivers must be stored under {TEMPLATE_PREFIX}."})
            if self.belongs_to_user_id or self.child_id or self.template_id:
                raise ValidationError("Template waivers cannot belong to a participant.")
        else:
            if not self.file_key.startswith(COMPLETED_PREFIX):
                raise ValidationError({"file_key": f"Completed waivers must be stored under {COMPLETED_PREFIX}."})
            if not (self.event_id and self.template_id and self.belongs_to_user_id):
                raise ValidationError("Completed waivers need an event, a template and a participant.")
