from django import forms
from django.conf import settings
from django.contrib.auth.forms import AuthenticationForm
from django.core.exceptions import ValidationError

from accounts.models import User

PASSWORD_MISMATCH_MESSAGE = "Les mots de passe ne correspondent pas"
PASSWORD_TOO_SHORT_MESSAGE = "Le mot de passe doit contenir au moins 6 caractères"
MIN_PASSWORD_LENGTH = 6


class LoginForm(AuthenticationForm):
    username = forms.EmailField(label="Email", widget=forms.EmailInput(attrs={"autofocus": True}))

    def clean_username(self):
        # Accounts are stored with a lowercased email as username.
        return self.cleaned_data["username"].strip().lower()


class AdminCreateForm(forms.Form):
    email = forms.EmailField(label="Email")
    password = forms.CharField(label="Mot de passe", min_length=6, widget=forms.PasswordInput)
    role = forms.ChoiceField(
        label="Rôle",
        choices=[
            (User.Role.ADMIN, User.Role.ADMIN.label),
            (User.Role.SUPER_ADMIN, User.Role.SUPER_ADMIN.label),
        ],
        initial=User.Role.ADMIN,
    )


class ForgotPasswordForm(forms.Form):
    email = forms.EmailField(label="Email")


class EmergencyResetForm(forms.Form):
    secret = forms.CharField(label="Code d'accès", widget=forms.PasswordInput)
    email = forms.EmailField(label="Email")
    new_password = forms.CharField(label="Nouveau mot de passe", widget=forms.PasswordInput)
    confirm_password = forms.CharField(label="Confirmer le mot de passe", widget=forms.PasswordInput)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["email"].initial = settings.PROTECTED_ADMIN_EMAIL

    def clean(self):
        cleaned = super().clean()
        password = cleaned.get("new_password") or ""
        if password != (cleaned.get("confirm_password") or ""):
            raise ValidationError(PASSWORD_MISMATCH_MESSAGE, code="password_mismatch")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(PASSWORD_TOO_SHORT_MESSAGE, code="password_too_short")
        return cleaned
