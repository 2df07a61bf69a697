from __future__ import annotations

import json
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from accounts import services

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey, X-Reset-Secret",
}


def _with_cors(response: HttpResponse) -> HttpResponse:
    for header, value in CORS_HEADERS.items():
        response[header] = value
    return response


def _json(payload: dict[str, object], status: int = 200) -> HttpResponse:
    return _with_cors(JsonResponse(payload, status=status))


def _read_body(request) -> dict[str, object]:
    payload = json.loads(request.body or b"{}")
    if not isinstance(payload, dict):
        raise ValueError("Le corps de la requête doit être un objet JSON")
    return payload


@csrf_exempt
@require_http_methods(["POST", "OPTIONS"])
def admin_reset_password(request):
    if request.method == "OPTIONS":
        return _with_cors(HttpResponse(status=200))
    if not services.reset_secret_matches(request.headers.get("X-Reset-Secret")):
        return _json({"error": "Accès refusé"}, status=403)
    try:
        payload = _read_body(request)
    except ValueError as exc:
        return _json({"error": str(exc)}, status=400)

    email = payload.get("email")
    new_password = payload.get("newPassword")
    if not email or not new_password:
        return _json({"error": "Email et nouveau mot de passe requis"}, status=400)

    try:
        services.reset_password(str(email), str(new_password))
    except services.UserNotFound as exc:
        return _json({"error": str(exc)}, status=404)
    except Exception as exc:  # noqa: BLE001 - reported to the caller as a 500
        logger.exception("Emergency password reset failed for %s", email)
        return _json({"error": str(exc) or "Erreur serveur"}, status=500)
    return _json({"success": True, "message": "Mot de passe mis à jour avec succès"})


@csrf_exempt
@require_http_methods(["POST", "OPTIONS"])
def generate_reset_link(request):
    if request.method == "OPTIONS":
        return _with_cors(HttpResponse(status=200))
    try:
        payload = _read_body(request)
    except ValueError as exc:
        return _json({"error": str(exc)}, status=400)

    email = payload.get("email")
    if not email:
        return _json({"error": "Email requis"}, status=400)

    try:
        link = services.generate_recovery_link(str(email), payload.get("redirectTo") or None)
    except Exception as exc:  # noqa: BLE001 - reported to the caller as a 500
        logger.exception("Recovery link generation failed for %s", email)
        return _json({"error": str(exc) or "Erreur serveur"}, status=500)
    return _json(
        {
            "success": True,
            "resetLink": link,
            "message": "Lien de réinitialisation généré",
        }
    )
