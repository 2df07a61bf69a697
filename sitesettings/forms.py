from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError


class LogoUploadForm(forms.Form):
    logo = forms.FileField(label="Logo")

    def clean_logo(self):
        upload = self.cleaned_data["logo"]
        content_type = getattr(upload, "content_type", "") or ""
        if not content_type.startswith("image/"):
            raise ValidationError("Veuillez sélectionner un fichier image")
        if upload.size > settings.LOGO_MAX_UPLOAD_BYTES:
            raise ValidationError("Le fichier doit faire moins de 5 MB")
        return upload
