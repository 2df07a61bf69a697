from django.conf import settings
from django.db import models


class Producer(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="producer",
    )
    company_name = models.CharField(max_length=255)
    contact_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=255, blank=True)
    postal_code = models.CharField(max_length=16, blank=True)
    city = models.CharField(max_length=128, blank=True)
    region = models.CharField(max_length=64, blank=True)
    products = models.JSONField(default=list, blank=True)
    categories = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True)
    website = models.URLField(blank=True)
    logo_url = models.CharField(max_length=500, blank=True)
    is_visible = models.BooleanField(default=True)
    is_blocked = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("company_name",)

    def __str__(self) -> str:
        return self.company_name


class ImportHistory(models.Model):
    class Source(models.TextChoices):
        CSV = "csv", "CSV"
        GOOGLE_SHEETS = "google_sheets", "Google Sheets"

    filename = models.CharField(max_length=255)
    source = models.CharField(max_length=20, choices=Source.choices, default=Source.CSV)
    total_rows = models.PositiveIntegerField(default=0)
    imported_rows = models.PositiveIntegerField(default=0)
    failed_rows = models.PositiveIntegerField(default=0)
    errors = models.JSONField(default=list, blank=True)
    imported_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="imports",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "import history"

    def __str__(self) -> str:
        return f"{self.filename} ({self.imported_rows}/{self.total_rows})"
