from __future__ import annotations

import hmac
import logging
from urllib.parse import urlencode

from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.db import IntegrityError, transaction
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from accounts.models import ProtectedAccountError, User
from auditing.models import AuditLog

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Cette adresse email est déjà enregistrée"
PROTECTED_DELETE_MESSAGE = "Impossible de supprimer le super administrateur principal"
USER_NOT_FOUND_MESSAGE = "Utilisateur non trouvé"


class AccountError(Exception):
    pass


class UserNotFound(AccountError):
    def __init__(self, message: str = USER_NOT_FOUND_MESSAGE) -> None:
        super().__init__(message)


def _build_base_url() -> str:
    return settings.SITE_BASE_URL.rstrip("/")


def find_user_by_email(email: str) -> User:
    user = User.objects.filter(email__iexact=(email or "").strip()).first()
    if user is None:
        raise UserNotFound()
    return user


def create_account(email: str, password: str, role: str) -> User:
    email = email.strip().lower()
    return User.objects.create_user(username=email, email=email, password=password, role=role)


def list_admins():
    return User.objects.filter(role__in=[User.Role.ADMIN, User.Role.SUPER_ADMIN]).order_by("-date_joined")


def create_admin(*, email: str, password: str, role: str, created_by: User) -> User:
    if role not in {User.Role.ADMIN, User.Role.SUPER_ADMIN}:
        raise AccountError(f"Rôle invalide: {role}")
    try:
        with transaction.atomic():
            admin = create_account(email, password, role)
    except IntegrityError as exc:
        raise AccountError(DUPLICATE_EMAIL_MESSAGE) from exc
    AuditLog.record(AuditLog.Action.ADMIN_CREATED, actor=created_by, target=admin.email, role=role)
    logger.info("Admin %s created with role %s", admin.email, role)
    return admin


def delete_admin(admin: User, *, deleted_by: User) -> None:
    """Remove an administrator account together with its role."""
    if admin.is_protected:
        raise ProtectedAccountError(PROTECTED_DELETE_MESSAGE)
    if admin.pk == deleted_by.pk:
        raise AccountError("Vous ne pouvez pas supprimer votre propre compte")
    email = admin.email
    admin.delete()
    AuditLog.record(AuditLog.Action.ADMIN_DELETED, actor=deleted_by, target=email)
    logger.info("Admin %s deleted by %s", email, deleted_by.email)


def reset_secret_matches(provided: str | None) -> bool:
    """Constant-time check of the emergency reset secret; an empty setting disables it."""
    expected = settings.EMERGENCY_RESET_SECRET
    if not expected:
        return False
    return hmac.compare_digest((provided or "").encode("utf-8"), expected.encode("utf-8"))


def reset_password(email: str, new_password: str) -> User:
    user = find_user_by_email(email)
    user.set_password(new_password)
    user.save(update_fields=["password"])
    AuditLog.record(AuditLog.Action.PASSWORD_RESET, target=user.email)
    logger.warning("Password for %s reset through the emergency endpoint", user.email)
    return user


def generate_recovery_link(email: str, redirect_to: str | None = None) -> str:
    """Absolute URL of the password reset confirmation page for ``email``."""
    user = find_user_by_email(email)
    path = reverse(
        "accounts:password-reset-confirm",
        kwargs={
            "uidb64": urlsafe_base64_encode(force_bytes(user.pk)),
            "token": default_token_generator.make_token(user),
        },
    )
    link = f"{_build_base_url()}{path}"
    if redirect_to:
        link = f"{link}?{urlencode({'next': redirect_to})}"
    AuditLog.record(AuditLog.Action.RESET_LINK_GENERATED, target=user.email)
    return link
