from django.contrib import admin

from sitesettings.models import SiteSetting


@admin.register(SiteSetting)
class SiteSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_by", "updated_at")
    readonly_fields = ("updated_at",)
