"""Admin interface for accounts, children and emergency contacts."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import Child, EmergencyContact, User

PROFILE_FIELDS = (
    ("gender", "birthday"),
    "image_key",
    "photo_release",
    "allergies",
    "insurance",
    ("doctor_name", "doctor_phone"),
    "behavior_notes",
    "dietary_restrictions",
    "other_notes",
)


class EmergencyContactInline(admin.TabularInline):  # type: ignore[type-arg]
    model = EmergencyContact
    fk_name = "user"
    extra = 0
    fields = ["name", "phone", "work_phone", "relationship", "can_pickup"]


class ChildEmergencyContactInline(EmergencyContactInline):
    fk_name = "child"


class ChildInline(admin.TabularInline):  # type: ignore[type-arg]
    model = Child
    extra = 0
    fields = ["first_name", "last_name", "gender", "birthday"]
    show_change_link = True


@admin.register(User)
class RegistrarUserAdmin(UserAdmin):  # type: ignore[type-arg]
    list_display = ["username", "email", "first_name", "last_name", "is_staff", "is_active", "date_joined"]
    list_filter = ["is_staff", "is_superuser", "is_active", "date_joined"]
    search_fields = ["username", "first_name", "last_name", "email", "phone_cell"]
    ordering = ["-date_joined"]
    inlines = [EmergencyContactInline, ChildInline]
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Contact", {"fields": ("address_home", ("address_city", "address_zip_code"), ("phone_cell", "phone_work"))}),
        ("Profile", {"fields": PROFILE_FIELDS}),
    )


@admin.register(Child)
class ChildAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["get_full_name", "parent", "birthday", "created_at"]
    search_fields = ["first_name", "last_name", "parent__email"]
    raw_id_fields = ["parent"]
    inlines = [ChildEmergencyContactInline]
    fieldsets = (
        (None, {"fields": ("parent", ("first_name", "last_name"))}),
        ("Profile", {"fields": PROFILE_FIELDS}),
    )
