from django.contrib import admin

from producers.models import ImportHistory, Producer


@admin.register(Producer)
class ProducerAdmin(admin.ModelAdmin):
    list_display = ("company_name", "email", "city", "region", "is_visible", "is_blocked", "created_at")
    list_filter = ("region", "is_visible", "is_blocked")
    search_fields = ("company_name", "email", "contact_name", "city")


@admin.register(ImportHistory)
class ImportHistoryAdmin(admin.ModelAdmin):
    list_display = ("filename", "source", "total_rows", "imported_rows", "failed_rows", "imported_by", "created_at")
    list_filter = ("source", "created_at")
    readonly_fields = ("errors",)
