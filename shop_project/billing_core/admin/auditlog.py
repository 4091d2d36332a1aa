from django.contrib import admin

from billing_core.models import AuditLog, Counter

from .actions import reset_counters
from .readonly import ReadOnlyAdmin


# Register `AuditLog` model
@admin.register(AuditLog)
class AuditLogAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "user",
        "action",
        "object_type",
        "object_id",
        "created_at",
    )
    search_fields = ("object_type", "object_id", "user__username")
    list_filter = ("action", "created_at")

    # Fetch everything in one SQL join
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("user")


# Register `Counter` model
@admin.register(Counter)
class CounterAdmin(ReadOnlyAdmin):
    list_display = ("name", "seq")
    actions = [reset_counters]
