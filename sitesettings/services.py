from __future__ import annotations

import logging
import os

from django.conf import settings
from django.core.cache import cache
from django.core.files.storage import default_storage
from django.utils import timezone

from auditing.models import AuditLog
from sitesettings.models import SiteSetting

logger = logging.getLogger(__name__)

LOGO_CACHE_KEY = "sitesettings:logo_url"


def get_logo_url() -> str:
    """Current logo URL, read from the database at most once per cache timeout."""
    url = cache.get(LOGO_CACHE_KEY)
    if url is None:
        url = (
            SiteSetting.objects.filter(key=SiteSetting.LOGO_URL).values_list("value", flat=True).first()
            or settings.DEFAULT_LOGO_URL
        )
        cache.set(LOGO_CACHE_KEY, url, settings.SITE_SETTINGS_CACHE_TIMEOUT)
    return url


def set_logo_url(url: str, updated_by) -> SiteSetting:
    setting, _ = SiteSetting.objects.update_or_create(
        key=SiteSetting.LOGO_URL,
        defaults={"value": url, "updated_by": updated_by},
    )
    cache.set(LOGO_CACHE_KEY, url, settings.SITE_SETTINGS_CACHE_TIMEOUT)
    AuditLog.record(AuditLog.Action.LOGO_UPDATED, actor=updated_by, target=url)
    return setting


def upload_logo(upload, updated_by) -> str:
    """Store an uploaded image under ``logos/`` and make it the site logo."""
    extension = os.path.splitext(upload.name)[1].lstrip(".").lower() or "png"
    path = f"logos/logo-{int(timezone.now().timestamp() * 1000)}.{extension}"
    saved_path = default_storage.save(path, upload)
    url = default_storage.url(saved_path)
    set_logo_url(url, updated_by)
    logger.info("Logo replaced by %s (%s)", url, getattr(updated_by, "email", None))
    return url
