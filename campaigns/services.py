from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Iterable

from django.db import transaction
from django.utils import timezone

from auditing.models import AuditLog
from campaigns.models import Campaign, CampaignRecipient, EmailTemplate

logger = logging.getLogger(__name__)

NO_RECIPIENT_MESSAGE = "Veuillez sélectionner au moins un destinataire"
NO_TEMPLATE_MESSAGE = "Veuillez sélectionner un modèle d'email"
PAST_SCHEDULE_MESSAGE = "Veuillez indiquer une date d'envoi future"

PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

SAMPLE_CONTEXT = {
    "company_name": "Ferme Exemple",
    "contact_name": "Jean Dupont",
    "first_name": "Jean",
    "email": "contact@exemple.fr",
    "prenom": "Jean",
    "entreprise": "Ferme Exemple",
}


class CampaignError(Exception):
    pass


def extract_variables(*texts: str) -> list[str]:
    seen: list[str] = []
    for text in texts:
        for name in PLACEHOLDER_RE.findall(text or ""):
            if name not in seen:
                seen.append(name)
    return seen


def render_template(template: str, context: dict[str, Any]) -> str:
    def _replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in context:
            return match.group(0)
        return str(context[key])

    return PLACEHOLDER_RE.sub(_replace, template or "")


def preview_template(template: EmailTemplate) -> dict[str, str]:
    return {
        "subject": render_template(template.subject, SAMPLE_CONTEXT),
        "content": render_template(template.content, SAMPLE_CONTEXT),
    }


def save_template(form, saved_by) -> EmailTemplate:
    template = form.save(commit=False)
    if not template.variables:
        template.variables = extract_variables(template.subject, template.content)
    if template.pk is None:
        template.created_by = saved_by
    template.save()
    AuditLog.record(AuditLog.Action.TEMPLATE_SAVED, actor=saved_by, target=template.name)
    return template


def delete_template(template: EmailTemplate, deleted_by) -> None:
    name = template.name
    template.delete()
    AuditLog.record(AuditLog.Action.TEMPLATE_DELETED, actor=deleted_by, target=name)


def create_campaign(
    *,
    name: str,
    description: str,
    template: EmailTemplate | None,
    producers: Iterable,
    send_immediately: bool,
    scheduled_at: datetime | None,
    created_by,
) -> Campaign:
    """
    Create a campaign and materialize one recipient per selected producer.

    Recipients copy the producer's email, company and contact name as
    they are right now; later edits to the producer are not propagated.
    """
    selected = list(producers)
    if not selected:
        raise CampaignError(NO_RECIPIENT_MESSAGE)
    if template is None:
        raise CampaignError(NO_TEMPLATE_MESSAGE)
    if send_immediately:
        status, scheduled_at = Campaign.Status.DRAFT, None
    else:
        if scheduled_at is None or scheduled_at <= timezone.now():
            raise CampaignError(PAST_SCHEDULE_MESSAGE)
        status = Campaign.Status.SCHEDULED

    with transaction.atomic():
        campaign = Campaign.objects.create(
            name=name,
            description=description,
            template=template,
            status=status,
            scheduled_at=scheduled_at,
            total_recipients=len(selected),
            created_by=created_by,
        )
        CampaignRecipient.objects.bulk_create(
            [
                CampaignRecipient(
                    campaign=campaign,
                    producer=producer,
                    email=producer.email,
                    company_name=producer.company_name,
                    contact_name=producer.contact_name or "",
                )
                for producer in selected
            ]
        )
    AuditLog.record(
        AuditLog.Action.CAMPAIGN_CREATED,
        actor=created_by,
        target=campaign.name,
        campaign_id=campaign.id,
        status=status,
        total_recipients=len(selected),
    )
    logger.info("Campaign %s created (%s) with %s recipients", campaign.id, status, len(selected))
    return campaign
