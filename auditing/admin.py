from django.contrib import admin

from auditing.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action", "target", "actor", "created_at")
    list_filter = ("action", "created_at")
    search_fields = ("target", "actor__email")
    readonly_fields = ("action", "actor", "target", "metadata", "created_at")

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False
