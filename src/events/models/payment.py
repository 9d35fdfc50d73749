from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class Payment(TimeStampedModel):
    """Ledger row for a confirmed Stripe Checkout Session.

    Only written when the payment is confirmed, in the same transaction as the
    roster commit; there is no pending state.
    """

    # Event and payer are nullable so the financial record survives their deletion.
    event = models.ForeignKey("events.Event", on_delete=models.SET_NULL, null=True, related_name="payments")
    payer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="payments")
    stripe_session_id = models.CharField(max_length=255, unique=True)
    stripe_payment_intent_id = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    amount = models.PositiveIntegerField(help_text="Amount in minor currency units.")
    currency = models.CharField(max_length=3)
    participants = models.JSONField(default=list, blank=True)
    raw_response = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.stripe_session_id} ({self.amount} {self.currency})"
