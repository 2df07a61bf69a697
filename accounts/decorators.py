from __future__ import annotations

import logging
from functools import wraps

from django.contrib import messages
from django.contrib.auth import logout
from django.shortcuts import redirect

logger = logging.getLogger(__name__)


def admin_required(view_func):
    """Only admins and super admins get through; anyone else is signed out."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        user = request.user
        if not user.is_authenticated:
            return redirect("accounts:login")
        if not user.is_admin:
            logger.warning("Non-admin user %s signed out from %s", user.pk, request.path)
            logout(request)
            messages.error(request, "Vous n'avez pas les droits d'administration")
            return redirect("accounts:login")
        return view_func(request, *args, **kwargs)

    return _wrapped


def super_admin_required(view_func):
    @wraps(view_func)
    @admin_required
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_super_admin:
            return redirect("producers:dashboard")
        return view_func(request, *args, **kwargs)

    return _wrapped


def producer_required(view_func):
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        user = request.user
        if not user.is_authenticated or not user.is_producer:
            return redirect("accounts:login")
        return view_func(request, *args, **kwargs)

    return _wrapped
