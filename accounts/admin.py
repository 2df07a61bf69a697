from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from accounts.models import User


@admin.register(User)
class MarketUserAdmin(UserAdmin):
    list_display = ("email", "role", "is_protected", "is_active", "date_joined")
    list_filter = ("role", "is_protected", "is_active")
    search_fields = ("email",)
    ordering = ("-date_joined",)
    readonly_fields = ("is_protected", "last_login", "date_joined")
    fieldsets = UserAdmin.fieldsets + (("MIF Market", {"fields": ("role", "is_protected")}),)
    add_fieldsets = UserAdmin.add_fieldsets + (("MIF Market", {"fields": ("email", "role")}),)

    def has_delete_permission(self, request, obj=None) -> bool:
        if obj is not None and obj.is_protected:
            return False
        return super().has_delete_permission(request, obj)

