from django.contrib import admin

from waivers.models import Waiver


@admin.register(Waiver)
class WaiverAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["file_name", "kind", "event", "belongs_to_user", "child", "uploaded_at"]
    list_filter = ["kind", "is_for_child"]
    search_fields = ["file_name", "file_key", "belongs_to_user__email", "child__last_name", "event__title"]
    raw_id_fields = ["event", "uploaded_by", "belongs_to_user", "child", "template"]
    readonly_fields = ["id", "created_at", "updated_at"]
    list_select_related = ["event", "belongs_to_user", "child"]
