import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("events", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Waiver",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[("template", "Template"), ("completed", "Completed")], db_index=True, max_length=16
                    ),
                ),
                ("file_key", models.CharField(max_length=512, unique=True)),
                ("file_name", models.CharField(max_length=255)),
                ("is_for_child", models.BooleanField(default=False)),
                ("uploaded_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "belongs_to_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="waivers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "child",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="waivers",
                        to="accounts.child",
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="waivers",
                        to="events.event",
                    ),
                ),
                (
                    "template",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="completed_copies",
                        to="waivers.waiver",
                    ),
                ),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="uploaded_waivers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-uploaded_at"],
                "indexes": [
                    models.Index(fields=["event", "belongs_to_user", "child"], name="ix_waiver_event_participant")
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("child__isnull", True), ("is_for_child", False))
                        | models.Q(("child__isnull", False), ("is_for_child", True)),
                        name="waiver_is_for_child_matches_child",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("child__isnull", True), ("kind", "completed")),
                        fields=("event", "template", "belongs_to_user"),
                        name="unique_completed_waiver_per_adult",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("child__isnull", False), ("kind", "completed")),
                        fields=("event", "template", "child"),
                        name="unique_completed_waiver_per_child",
                    ),
                ],
            },
        ),
    ]
