"""Admin classes for events, rosters and payments."""

import typing as t

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from events import models


class UserLinkMixin:
    """Mixin to add a link to a user."""

    def user_link(self, obj: t.Any) -> str | None:
        user = getattr(obj, "user", getattr(obj, "payer", None))
        if user is None:
            return None
        url = reverse("admin:accounts_user_change", args=[user.id])
        return format_html('<a href="{}">{}</a>', url, user.username)

    user_link.short_description = "User"  # type: ignore[attr-defined]


class EventLinkMixin:
    """Mixin to add a link to an event."""

    def event_link(self, obj: t.Any) -> str | None:
        if not obj.event_id:
            return None
        url = reverse("admin:events_event_change", args=[obj.event_id])
        return format_html('<a href="{}">{}</a>', url, obj.event.title)

    event_link.short_description = "Event"  # type: ignore[attr-defined]


class RosterEntryInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.RosterEntry
    extra = 0
    fields = ["user", "child", "waiver_status", "created_at"]
    readonly_fields = ["created_at"]
    raw_id_fields = ["user", "child"]


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["title", "start", "registration_deadline", "capacity", "fee", "currency", "is_draft", "roster_size"]
    list_filter = ["is_draft", "start"]
    search_fields = ["title", "location"]
    date_hierarchy = "start"
    filter_horizontal = ["required_waivers"]
    readonly_fields = ["id", "created_at", "updated_at"]
    inlines = [RosterEntryInline]
    fieldsets = [
        ("Details", {"fields": ("id", "title", "description", "location", "is_draft", "image_keys")}),
        ("Schedule", {"fields": (("start", "end"), "registration_deadline")}),
        ("Admission", {"fields": ("capacity", ("fee", "currency"), "payment_note", "required_waivers")}),
        ("Metadata", {"fields": ("created_by", "created_at", "updated_at"), "classes": ("collapse",)}),
    ]

    def get_queryset(self, request: t.Any) -> t.Any:
        return super().get_queryset(request).with_participant_count()

    @admin.display(description="Participants", ordering="participant_count")
    def roster_size(self, obj: models.Event) -> int:
        return obj.participant_count  # type: ignore[attr-defined,no-any-return]


@admin.register(models.RosterEntry)
class RosterEntryAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["__str__", "event_link", "user_link", "child", "all_waivers_signed", "created_at"]
    list_filter = ["event"]
    search_fields = ["user__email", "user__last_name", "child__last_name", "event__title"]
    raw_id_fields = ["event", "user", "child"]
    list_select_related = ["event", "user", "child"]


@admin.register(models.Payment)
class PaymentAdmin(admin.ModelAdmin, UserLinkMixin, EventLinkMixin):  # type: ignore[type-arg]
    list_display = ["stripe_session_id", "event_link", "user_link", "amount", "currency", "created_at"]
    search_fields = ["stripe_session_id", "stripe_payment_intent_id", "payer__email"]
    readonly_fields = [field.name for field in models.Payment._meta.fields]
    list_select_related = ["event", "payer"]

    def has_add_permission(self, request: t.Any) -> bool:
        return False
