import uuid

import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import accounts.models
import accounts.validators


def profile_fields() -> list[tuple[str, models.Field]]:  # type: ignore[type-arg]
    return [
        (
            "gender",
            models.CharField(
                blank=True,
                choices=[
                    ("male", "Male"),
                    ("female", "Female"),
                    ("non_binary", "Non-binary"),
                    ("undisclosed", "Prefer not to say"),
                ],
                max_length=16,
            ),
        ),
        ("birthday", models.DateField(blank=True, null=True)),
        (
            "image_key",
            models.CharField(blank=True, help_text="Storage key of the profile picture", max_length=512),
        ),
        ("photo_release", models.BooleanField(blank=True, null=True)),
        ("allergies", models.TextField(blank=True)),
        ("insurance", models.CharField(blank=True, max_length=255)),
        ("doctor_name", models.CharField(blank=True, max_length=255)),
        ("doctor_phone", models.CharField(blank=True, max_length=32)),
        ("behavior_notes", models.TextField(blank=True)),
        ("dietary_restrictions", models.TextField(blank=True)),
        ("other_notes", models.TextField(blank=True)),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "username",
                    models.CharField(
                        error_messages={"unique": "A user with that username already exists."},
                        help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.",
                        max_length=150,
                        unique=True,
                        validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                        verbose_name="username",
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into this admin site.",
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text=(
                            "Designates whether this user should be treated as active. "
                            "Unselect this instead of deleting accounts."
                        ),
                        verbose_name="active",
                    ),
                ),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                *profile_fields(),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "address_home",
                    models.CharField(blank=True, max_length=255),
                ),
                ("address_city", models.CharField(blank=True, max_length=128)),
                (
                    "address_zip_code",
                    models.CharField(
                        blank=True, max_length=10, validators=[accounts.validators.validate_zip_code]
                    ),
                ),
                (
                    "phone_cell",
                    models.CharField(
                        blank=True, max_length=20, validators=[accounts.validators.validate_phone_number]
                    ),
                ),
                (
                    "phone_work",
                    models.CharField(
                        blank=True, max_length=20, validators=[accounts.validators.validate_phone_number]
                    ),
                ),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text=(
                            "The groups this user belongs to. A user will get all permissions "
                            "granted to each of their groups."
                        ),
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "ordering": ["username"],
            },
            managers=[
                ("objects", accounts.models.AccountManager()),
            ],
        ),
        migrations.CreateModel(
            name="Child",
            fields=[
                *profile_fields(),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("first_name", models.CharField(max_length=150)),
                ("last_name", models.CharField(max_length=150)),
                (
                    "parent",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="children",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "children",
                "ordering": ["first_name", "last_name"],
            },
        ),
        migrations.CreateModel(
            name="EmergencyContact",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(max_length=20, validators=[accounts.validators.validate_phone_number])),
                (
                    "work_phone",
                    models.CharField(
                        blank=True, max_length=20, validators=[accounts.validators.validate_phone_number]
                    ),
                ),
                ("relationship", models.CharField(max_length=64)),
                ("can_pickup", models.BooleanField(default=False)),
                (
                    "child",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="emergency_contacts",
                        to="accounts.child",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="emergency_contacts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("child__isnull", True), ("user__isnull", False))
                        | models.Q(("child__isnull", False), ("user__isnull", True)),
                        name="emergency_contact_exactly_one_owner",
                    )
                ],
            },
        ),
    ]
