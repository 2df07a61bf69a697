from __future__ import annotations

import csv
import logging

from django.contrib import messages
from django.contrib.auth import logout
from django.http import HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import admin_required, producer_required
from producers import services
from producers.filters import DirectoryFilter
from producers.forms import CsvImportForm, ProducerAdminForm, ProducerProfileForm, RegistrationForm
from producers.models import ImportHistory, Producer
from producers.options import PRODUCT_CATEGORIES, REGIONS

logger = logging.getLogger(__name__)


@require_GET
def landing(request):
    return render(
        request,
        "producers/landing.html",
        {
            "form": RegistrationForm(),
            "producer_count": Producer.objects.count(),
        },
    )


@require_http_methods(["GET", "POST"])
def register(request):
    form = RegistrationForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            services.register_producer(form.cleaned_data)
        except services.RegistrationError as exc:
            form.add_error(None, str(exc))
        else:
            # Registration never leaves the browser signed in.
            logout(request)
            return render(request, "producers/registration_success.html")
    return render(request, "producers/register.html", {"form": form})


@require_GET
def directory(request):
    producers = list(Producer.objects.filter(is_visible=True).order_by("company_name"))
    directory_filter = DirectoryFilter.from_query(request.GET)
    return render(
        request,
        "producers/directory.html",
        {
            "producers": directory_filter.apply(producers),
            "total": len(producers),
            "filter": directory_filter,
            "regions": REGIONS,
            "categories": PRODUCT_CATEGORIES,
        },
    )


@producer_required
@require_http_methods(["GET", "POST"])
def profile(request):
    producer = Producer.objects.filter(user=request.user).first()
    if producer is None:
        messages.error(request, "Erreur lors du chargement du profil")
        return render(request, "producers/profile.html", {"form": None})
    form = ProducerProfileForm(request.POST or None, instance=producer)
    if request.method == "POST":
        if form.is_valid():
            services.update_producer(form, request.user)
            messages.success(request, "Profil mis à jour avec succès!")
            return redirect("producers:profile")
        messages.error(request, "Erreur lors de la mise à jour")
    return render(request, "producers/profile.html", {"form": form, "producer": producer})


@admin_required
@require_http_methods(["GET", "POST"])
def dashboard(request):
    form = ProducerAdminForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            services.create_producer(form, request.user)
            messages.success(request, "Producteur créé")
            return redirect("producers:dashboard")
        messages.error(request, "Erreur lors de la sauvegarde")
    return render(
        request,
        "producers/dashboard.html",
        {
            "producers": Producer.objects.order_by("-created_at"),
            "stats": services.producer_stats(),
            "form": form,
        },
    )


@admin_required
@require_http_methods(["GET", "POST"])
def producer_edit(request, pk: int):
    producer = get_object_or_404(Producer, pk=pk)
    form = ProducerAdminForm(request.POST or None, instance=producer)
    if request.method == "POST":
        if form.is_valid():
            services.update_producer(form, request.user)
            return redirect("producers:dashboard")
        messages.error(request, "Erreur lors de la sauvegarde")
    return render(request, "producers/producer_form.html", {"form": form, "producer": producer})


@admin_required
@require_POST
def producer_toggle_visibility(request, pk: int):
    services.toggle_visibility(get_object_or_404(Producer, pk=pk), request.user)
    return redirect("producers:dashboard")


@admin_required
@require_POST
def producer_toggle_block(request, pk: int):
    services.toggle_block(get_object_or_404(Producer, pk=pk), request.user)
    return redirect("producers:dashboard")


@admin_required
@require_http_methods(["GET", "POST"])
def producer_delete(request, pk: int):
    producer = get_object_or_404(Producer, pk=pk)
    if request.method == "GET":
        return render(
            request,
            "confirm_delete.html",
            {
                "question": "Êtes-vous sûr de vouloir supprimer ce producteur ?",
                "subject": producer.company_name,
                "cancel_url": reverse("producers:dashboard"),
            },
        )
    services.delete_producer(producer, request.user)
    return redirect("producers:dashboard")


IMPORT_SESSION_KEY = "pending_csv_import"


def _run_import(request, content, filename):
    try:
        history = services.import_producers_csv(content, filename=filename, imported_by=request.user)
    except (ValueError, csv.Error):
        logger.exception("Error importing file %s", filename)
        messages.error(request, "Erreur lors de l'import du fichier")
        return None
    messages.success(
        request,
        f"Import terminé: {history.imported_rows} réussis, {history.failed_rows} échecs",
    )
    return redirect("producers:import")


@admin_required
@require_http_methods(["GET", "POST"])
def import_producers(request):
    """
    Upload a CSV, optionally previewing its first rows before importing.

    A previewed file is kept in the session until it is confirmed or
    replaced by another upload.
    """
    if request.method == "POST" and "confirm" in request.POST:
        pending = request.session.pop(IMPORT_SESSION_KEY, None)
        if pending is None:
            messages.error(request, "Aucun fichier en attente d'import")
            return redirect("producers:import")
        response = _run_import(request, pending["content"], pending["filename"])
        return response or redirect("producers:import")

    form = CsvImportForm(request.POST or None, request.FILES or None)
    preview = None
    if request.method == "POST":
        if form.is_valid():
            upload = form.cleaned_data["file"]
            if "preview" in request.POST:
                try:
                    content = upload.read().decode("utf-8-sig")
                    headers, rows = services.preview_csv(content)
                except (ValueError, csv.Error):
                    logger.exception("Error previewing file %s", upload.name)
                    messages.error(request, "Erreur lors de la lecture du fichier")
                else:
                    request.session[IMPORT_SESSION_KEY] = {"filename": upload.name, "content": content}
                    preview = {"filename": upload.name, "headers": headers, "rows": rows}
            else:
                response = _run_import(request, upload.read(), upload.name)
                if response is not None:
                    return response
        else:
            for error in form.errors.get("file", []):
                messages.error(request, error)
    return render(
        request,
        "producers/import.html",
        {
            "form": form,
            "preview": preview,
            "history": ImportHistory.objects.order_by("-created_at")[:10],
        },
    )


@admin_required
@require_GET
def import_template(request):
    response = HttpResponse(services.CSV_TEMPLATE, content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = 'attachment; filename="template_import_producteurs.csv"'
    return response
