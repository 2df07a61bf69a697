from __future__ import annotations

import logging

from django.contrib import messages
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_http_methods

from accounts.decorators import admin_required
from campaigns import services
from campaigns.forms import CampaignForm, EmailTemplateForm
from campaigns.models import Campaign, EmailTemplate

logger = logging.getLogger(__name__)


@admin_required
@require_GET
def template_list(request):
    return render(
        request,
        "campaigns/templates.html",
        {"templates": EmailTemplate.objects.order_by("-created_at")},
    )


@admin_required
@require_http_methods(["GET", "POST"])
def template_edit(request, pk: int | None = None):
    template = get_object_or_404(EmailTemplate, pk=pk) if pk else None
    form = EmailTemplateForm(request.POST or None, instance=template)
    if request.method == "POST":
        if form.is_valid():
            services.save_template(form, request.user)
            return redirect("campaigns:templates")
        messages.error(request, "Erreur lors de la sauvegarde du modèle")
    return render(request, "campaigns/template_form.html", {"form": form, "template": template})


@admin_required
@require_GET
def template_preview(request, pk: int):
    template = get_object_or_404(EmailTemplate, pk=pk)
    return render(
        request,
        "campaigns/template_preview.html",
        {"template": template, "preview": services.preview_template(template)},
    )


@admin_required
@require_http_methods(["GET", "POST"])
def template_delete(request, pk: int):
    template = get_object_or_404(EmailTemplate, pk=pk)
    if request.method == "GET":
        return render(
            request,
            "confirm_delete.html",
            {
                "question": "Êtes-vous sûr de vouloir supprimer ce modèle ?",
                "subject": template.name,
                "cancel_url": reverse("campaigns:templates"),
            },
        )
    services.delete_template(template, request.user)
    return redirect("campaigns:templates")


@admin_required
@require_GET
def campaign_list(request):
    campaigns = Campaign.objects.select_related("template").order_by("-created_at")
    return render(request, "campaigns/campaigns.html", {"campaigns": campaigns})


@admin_required
@require_http_methods(["GET", "POST"])
def campaign_create(request):
    form = CampaignForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            services.create_campaign(
                name=form.cleaned_data["name"],
                description=form.cleaned_data["description"],
                template=form.cleaned_data["template"],
                producers=form.cleaned_data["producers"],
                send_immediately=form.send_immediately,
                scheduled_at=form.cleaned_data["scheduled_at"],
                created_by=request.user,
            )
        except services.CampaignError as exc:
            messages.error(request, str(exc))
        else:
            messages.success(request, "Campagne créée")
            return redirect("campaigns:campaigns")
    return render(request, "campaigns/campaign_form.html", {"form": form})
