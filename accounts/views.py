from __future__ import annotations

import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.views import PasswordResetConfirmView
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods, require_POST

from accounts import services
from accounts.decorators import super_admin_required
from accounts.forms import AdminCreateForm, EmergencyResetForm, ForgotPasswordForm, LoginForm
from accounts.models import ProtectedAccountError, User

logger = logging.getLogger(__name__)

NO_ADMIN_RIGHTS_MESSAGE = "Vous n'avez pas les droits d'administration"
RESET_DENIED_MESSAGE = "Accès refusé"
RESET_NEXT_SESSION_KEY = "password_reset_next"


def _home_for(user: User) -> str:
    if user.is_admin:
        return reverse("producers:dashboard")
    return reverse("producers:profile")


@require_http_methods(["GET", "POST"])
def login_view(request):
    if request.user.is_authenticated:
        return redirect(_home_for(request.user))
    form = LoginForm(request, data=request.POST or None)
    if request.method == "POST" and form.is_valid():
        user = form.get_user()
        producer = getattr(user, "producer", None) if user.is_producer else None
        if user.is_producer and (producer is None or producer.is_blocked):
            logger.info("Refused login for producer %s", user.email)
            messages.error(request, NO_ADMIN_RIGHTS_MESSAGE)
            return redirect("accounts:login")
        login(request, user)
        return redirect(_home_for(user))
    return render(request, "accounts/login.html", {"form": form})


@require_POST
def logout_view(request):
    logout(request)
    return redirect("accounts:login")


@super_admin_required
@require_http_methods(["GET", "POST"])
def admins_list(request):
    form = AdminCreateForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            services.create_admin(
                email=form.cleaned_data["email"],
                password=form.cleaned_data["password"],
                role=form.cleaned_data["role"],
                created_by=request.user,
            )
        except services.AccountError as exc:
            messages.error(request, f"Erreur lors de la création: {exc}")
        else:
            messages.success(request, "Administrateur créé avec succès")
            return redirect("accounts:admins")
    return render(
        request,
        "accounts/admins.html",
        {"admins": services.list_admins(), "form": form},
    )


@super_admin_required
@require_http_methods(["GET", "POST"])
def admin_delete(request, pk: int):
    admin = get_object_or_404(User, pk=pk, role__in=[User.Role.ADMIN, User.Role.SUPER_ADMIN])
    if admin.is_protected:
        messages.error(request, services.PROTECTED_DELETE_MESSAGE)
        return redirect("accounts:admins")
    if request.method == "GET":
        return render(
            request,
            "confirm_delete.html",
            {
                "question": "Êtes-vous sûr de vouloir supprimer cet administrateur ?",
                "subject": admin.email,
                "cancel_url": reverse("accounts:admins"),
            },
        )
    try:
        services.delete_admin(admin, deleted_by=request.user)
    except (ProtectedAccountError, services.AccountError) as exc:
        messages.error(request, str(exc))
    except Exception:
        logger.exception("Error deleting admin %s", admin.pk)
        messages.error(request, "Erreur lors de la suppression")
    return redirect("accounts:admins")


@require_http_methods(["GET", "POST"])
def forgot_password(request):
    form = ForgotPasswordForm(request.POST or None)
    reset_link = ""
    if request.method == "POST" and form.is_valid():
        try:
            reset_link = services.generate_recovery_link(
                form.cleaned_data["email"],
                request.build_absolute_uri(reverse("accounts:login")),
            )
        except services.UserNotFound as exc:
            form.add_error("email", str(exc))
    return render(request, "accounts/forgot_password.html", {"form": form, "reset_link": reset_link})


@require_http_methods(["GET", "POST"])
def emergency_reset(request):
    form = EmergencyResetForm(request.POST or None)
    done = False
    if request.method == "POST" and form.is_valid():
        if not services.reset_secret_matches(form.cleaned_data["secret"]):
            logger.warning("Emergency reset refused for %s: bad secret", form.cleaned_data["email"])
            form.add_error("secret", RESET_DENIED_MESSAGE)
        else:
            try:
                services.reset_password(form.cleaned_data["email"], form.cleaned_data["new_password"])
            except services.UserNotFound as exc:
                form.add_error("email", str(exc))
            else:
                done = True
                form = EmergencyResetForm(initial={"email": form.cleaned_data["email"]})
    return render(request, "accounts/emergency_reset.html", {"form": form, "done": done})


class RecoveryConfirmView(PasswordResetConfirmView):
    """Password reset confirmation that honours the ``next`` of a generated link."""

    template_name = "accounts/password_reset_confirm.html"

    def dispatch(self, *args, **kwargs):
        next_url = self.request.GET.get("next")
        if next_url and url_has_allowed_host_and_scheme(
            next_url, allowed_hosts={self.request.get_host()}, require_https=self.request.is_secure()
        ):
            self.request.session[RESET_NEXT_SESSION_KEY] = next_url
        return super().dispatch(*args, **kwargs)

    def get_success_url(self):
        return self.request.session.pop(RESET_NEXT_SESSION_KEY, None) or reverse("accounts:login")
