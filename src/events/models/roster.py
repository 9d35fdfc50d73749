import typing as t
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from accounts.participants import ParticipantRef, ref_from_ids

from .event import Event


class RosterEntry(models.Model):
    """One participant registered for one event.

    ``user`` is the registered adult, or the parent when the entry is for a child.
    ``waiver_status`` maps required template ids to ``pending`` or ``signed``.
    """

    class WaiverStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        SIGNED = "signed", "Signed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="roster")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="roster_entries")
    child = models.ForeignKey(
        "accounts.Child", on_delete=models.CASCADE, null=True, blank=True, related_name="roster_entries"
    )
    waiver_status = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        verbose_name_plural = "roster entries"
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                condition=Q(child__isnull=True),
                name="unique_adult_registration",
            ),
            models.UniqueConstraint(
                fields=["event", "child"],
                condition=Q(child__isnull=False),
                name="unique_child_registration",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.ref} @ {self.event_id}"

    @property
    def ref(self) -> ParticipantRef:
        return ref_from_ids(self.user_id, self.child_id)

    @property
    def is_child(self) -> bool:
        return self.child_id is not None

    @property
    def all_waivers_signed(self) -> bool:
        return all(status == self.WaiverStatus.SIGNED for status in self.waiver_status.values())

    def participant_name(self) -> str:
        participant: t.Any = self.child if self.child_id else self.user
        return str(participant.get_full_name())
