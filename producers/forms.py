from __future__ import annotations

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError

from producers.models import Producer
from producers.options import CATEGORY_CHOICES, REGION_CHOICES

CHARTER_REQUIRED_MESSAGE = "Vous devez accepter la charte du producteur MIF pour vous inscrire"
PASSWORD_MISMATCH_MESSAGE = "Les mots de passe ne correspondent pas"
PASSWORD_TOO_SHORT_MESSAGE = "Le mot de passe doit contenir au moins 6 caractères"
MIN_PASSWORD_LENGTH = 6


def split_comma_separated(raw: str) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


class CommaSeparatedField(forms.CharField):
    """Comma separated values (products, template variables) cleaned into an ordered list."""

    def prepare_value(self, value):
        if isinstance(value, (list, tuple)):
            return ", ".join(value)
        return value

    def to_python(self, value):
        return split_comma_separated(super().to_python(value))


class RegistrationForm(forms.Form):
    company_name = forms.CharField(label="Nom de l'entreprise", max_length=255)
    contact_name = forms.CharField(label="Nom du contact", max_length=255)
    email = forms.EmailField(label="Email")
    password = forms.CharField(label="Mot de passe", widget=forms.PasswordInput)
    password_confirm = forms.CharField(label="Confirmer le mot de passe", widget=forms.PasswordInput)
    phone = forms.CharField(label="Téléphone", max_length=32, required=False)
    address = forms.CharField(label="Adresse", max_length=255, required=False)
    postal_code = forms.CharField(label="Code postal", max_length=16, required=False)
    city = forms.CharField(label="Ville", max_length=128, required=False)
    region = forms.ChoiceField(label="Région", choices=[("", "Sélectionnez")] + REGION_CHOICES, required=False)
    products = CommaSeparatedField(label="Produits", required=False, help_text="Séparés par des virgules")
    categories = forms.MultipleChoiceField(
        label="Catégories",
        choices=CATEGORY_CHOICES,
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
    description = forms.CharField(label="Description", widget=forms.Textarea, required=False)
    website = forms.URLField(label="Site web", required=False, assume_scheme="https")
    charter_accepted = forms.BooleanField(label="J'accepte la charte du producteur MIF", required=False)

    def clean(self):
        cleaned = super().clean()
        if not cleaned.get("charter_accepted"):
            raise ValidationError(CHARTER_REQUIRED_MESSAGE, code="charter")
        password = cleaned.get("password") or ""
        if password != (cleaned.get("password_confirm") or ""):
            raise ValidationError(PASSWORD_MISMATCH_MESSAGE, code="password_mismatch")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(PASSWORD_TOO_SHORT_MESSAGE, code="password_too_short")
        return cleaned


class ProducerAdminForm(forms.ModelForm):
    class Meta:
        model = Producer
        fields = (
            "company_name",
            "contact_name",
            "email",
            "phone",
            "address",
            "postal_code",
            "city",
            "region",
            "description",
            "website",
        )
        widgets = {"region": forms.Select(choices=[("", "Sélectionnez")] + REGION_CHOICES)}


class ProducerProfileForm(forms.ModelForm):
    products = CommaSeparatedField(label="Produits", required=False, help_text="Séparés par des virgules")
    categories = forms.MultipleChoiceField(
        label="Catégories",
        choices=CATEGORY_CHOICES,
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = Producer
        fields = (
            "company_name",
            "contact_name",
            "phone",
            "address",
            "postal_code",
            "city",
            "region",
            "products",
            "categories",
            "description",
            "website",
            "logo_url",
            "is_visible",
        )
        widgets = {"region": forms.Select(choices=[("", "Sélectionnez")] + REGION_CHOICES)}


class CsvImportForm(forms.Form):
    file = forms.FileField(label="Fichier CSV")

    def clean_file(self):
        upload = self.cleaned_data["file"]
        name = (upload.name or "").lower()
        content_type = getattr(upload, "content_type", "") or ""
        if not name.endswith(".csv") and content_type != "text/csv":
            raise ValidationError("Veuillez sélectionner un fichier CSV valide")
        if upload.size > settings.CSV_MAX_UPLOAD_BYTES:
            raise ValidationError("Le fichier est trop volumineux")
        return upload
