from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from auditing.models import AuditLog
from producers.services import find_orphaned_accounts

logger = logging.getLogger(__name__)


@shared_task
def sweep_orphaned_producer_accounts() -> int:
    """Delete producer accounts that never got a directory entry."""
    cutoff = timezone.now() - timedelta(minutes=settings.ORPHAN_ACCOUNT_GRACE_MINUTES)
    with transaction.atomic():
        orphans = list(find_orphaned_accounts(cutoff).values_list("id", "email"))
        if not orphans:
            return 0
        find_orphaned_accounts(cutoff).filter(id__in=[pk for pk, _ in orphans]).delete()
        AuditLog.record(
            AuditLog.Action.ORPHANS_SWEPT,
            target=f"{len(orphans)} comptes",
            emails=[email for _, email in orphans],
        )
    logger.info("Swept %s orphaned producer accounts", len(orphans))
    return len(orphans)
