from django.contrib import admin

from campaigns.models import Campaign, CampaignRecipient, EmailTemplate


@admin.register(EmailTemplate)
class EmailTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "subject", "created_by", "created_at")
    search_fields = ("name", "subject")


class CampaignRecipientInline(admin.TabularInline):
    model = CampaignRecipient
    extra = 0
    fields = ("email", "company_name", "contact_name", "status")
    readonly_fields = ("email", "company_name", "contact_name")


@admin.register(Campaign)
class CampaignAdmin(admin.ModelAdmin):
    list_display = ("name", "template", "status", "scheduled_at", "total_recipients", "created_by")
    search_fields = ("name",)
    list_filter = ("status", "scheduled_at")
    inlines = (CampaignRecipientInline,)


@admin.register(CampaignRecipient)
class CampaignRecipientAdmin(admin.ModelAdmin):
    list_display = ("campaign", "email", "company_name", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("campaign__name", "email", "company_name")
