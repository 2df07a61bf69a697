from __future__ import annotations

import csv
import io
import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, Q

from accounts.services import DUPLICATE_EMAIL_MESSAGE, create_account
from auditing.models import AuditLog
from producers.models import ImportHistory, Producer

logger = logging.getLogger(__name__)

User = get_user_model()

UNSPECIFIED_COMPANY = "Non spécifié"

CSV_TEMPLATE = (
    "company_name,contact_name,email,phone,address,postal_code,city,region,description,website\n"
    "Exemple SARL,Jean Dupont,contact@exemple.fr,0123456789,123 rue exemple,75001,Paris,"
    "Île-de-France,Description de l'activité,https://exemple.fr\n"
)

# Producer field -> accepted CSV headers, first non-empty wins.
CSV_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "company_name": ("company_name", "entreprise"),
    "contact_name": ("contact_name", "contact"),
    "email": ("email", "mail"),
    "phone": ("phone", "telephone"),
    "address": ("address", "adresse"),
    "postal_code": ("postal_code", "code_postal"),
    "city": ("city", "ville"),
    "region": ("region",),
    "description": ("description",),
    "website": ("website", "site_web"),
}

PROFILE_FIELDS = (
    "company_name",
    "contact_name",
    "phone",
    "address",
    "postal_code",
    "city",
    "region",
    "products",
    "categories",
    "description",
    "website",
)


class RegistrationError(Exception):
    pass


def register_producer(data: dict[str, Any]) -> Producer:
    """
    Create the producer account and its directory entry in one transaction.

    ``data`` is the cleaned data of a valid registration form. Either both
    the user and the producer row exist afterwards, or neither does.
    """
    email = data["email"].strip().lower()
    try:
        with transaction.atomic():
            user = create_account(email, data["password"], User.Role.PRODUCER)
            producer = Producer.objects.create(
                user=user,
                email=email,
                is_visible=True,
                **{field: data.get(field) or _empty_for(field) for field in PROFILE_FIELDS},
            )
    except IntegrityError as exc:
        logger.info("Registration refused for %s: already registered", email)
        raise RegistrationError(DUPLICATE_EMAIL_MESSAGE) from exc
    except DatabaseError as exc:
        logger.exception("Registration failed for %s", email)
        raise RegistrationError(str(exc) or "Une erreur est survenue lors de l'inscription") from exc
    AuditLog.record(AuditLog.Action.PRODUCER_REGISTERED, actor=user, target=producer.email)
    logger.info("Producer %s registered (%s)", producer.pk, producer.company_name)
    return producer


def _empty_for(field: str):
    return [] if field in {"products", "categories"} else ""


def create_producer(form, created_by) -> Producer:
    producer = form.save(commit=False)
    producer.is_visible = False
    producer.save()
    AuditLog.record(AuditLog.Action.PRODUCER_CREATED, actor=created_by, target=producer.email)
    return producer


def update_producer(form, updated_by) -> Producer:
    producer = form.save()
    AuditLog.record(
        AuditLog.Action.PRODUCER_UPDATED,
        actor=updated_by,
        target=producer.email,
        fields=sorted(form.changed_data),
    )
    return producer


def toggle_visibility(producer: Producer, actor) -> bool:
    is_visible = not producer.is_visible
    Producer.objects.filter(pk=producer.pk).update(is_visible=is_visible)
    AuditLog.record(AuditLog.Action.PRODUCER_VISIBILITY, actor=actor, target=producer.email, is_visible=is_visible)
    return is_visible


def toggle_block(producer: Producer, actor) -> bool:
    is_blocked = not producer.is_blocked
    Producer.objects.filter(pk=producer.pk).update(is_blocked=is_blocked)
    AuditLog.record(AuditLog.Action.PRODUCER_BLOCK, actor=actor, target=producer.email, is_blocked=is_blocked)
    return is_blocked


def delete_producer(producer: Producer, actor) -> None:
    email = producer.email
    producer.delete()
    AuditLog.record(AuditLog.Action.PRODUCER_DELETED, actor=actor, target=email)
    logger.info("Producer %s deleted by %s", email, getattr(actor, "email", None))


def producer_stats() -> dict[str, int]:
    return Producer.objects.aggregate(
        total=Count("id"),
        visible=Count("id", filter=Q(is_visible=True)),
        hidden=Count("id", filter=Q(is_visible=False)),
        blocked=Count("id", filter=Q(is_blocked=True)),
    )


def _row_value(row: dict[str, str], field: str) -> str:
    for header in CSV_COLUMN_ALIASES[field]:
        value = row.get(header)
        if value:
            return value
    return ""


def _decode(content: bytes | str) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8-sig")
    return content


def parse_csv(content: bytes | str) -> tuple[list[str], list[tuple[int, dict[str, str]]]]:
    """
    Return the trimmed header and ``(line, row)`` pairs.

    Blank lines are skipped and do not count; the header is line 1.
    """
    lines = [values for values in csv.reader(io.StringIO(_decode(content))) if any(v.strip() for v in values)]
    if not lines:
        return [], []
    headers = [header.strip() for header in lines[0]]
    rows = []
    for index, values in enumerate(lines[1:], start=2):
        values = [value.strip() for value in values]
        rows.append((index, {header: values[i] if i < len(values) else "" for i, header in enumerate(headers)}))
    return headers, rows


PREVIEW_ROWS = 5


def preview_csv(content: bytes | str, limit: int = PREVIEW_ROWS) -> tuple[list[str], list[list[str]]]:
    """Header and the first ``limit`` rows as value lists, in header order."""
    headers, rows = parse_csv(content)
    return headers, [[row[header] for header in headers] for _, row in rows[:limit]]


def import_producers_csv(content: bytes | str, *, filename: str, imported_by) -> ImportHistory:
    """
    Insert one hidden producer per CSV row and append an ImportHistory entry.

    Rows are inserted independently: a failing row is recorded and the
    import carries on. Empty emails are not filtered out here.
    """
    _, rows = parse_csv(content)
    imported = 0
    errors: list[dict[str, Any]] = []
    for line, row in rows:
        values = {field: _row_value(row, field) for field in CSV_COLUMN_ALIASES}
        values["company_name"] = values["company_name"] or UNSPECIFIED_COMPANY
        try:
            with transaction.atomic():
                Producer.objects.create(is_visible=False, **values)
        except DatabaseError as exc:
            errors.append({"line": line, "error": str(exc)})
        else:
            imported += 1

    history = ImportHistory.objects.create(
        filename=filename,
        source=ImportHistory.Source.CSV,
        total_rows=len(rows),
        imported_rows=imported,
        failed_rows=len(errors),
        errors=errors,
        imported_by=imported_by,
    )
    AuditLog.record(
        AuditLog.Action.PRODUCERS_IMPORTED,
        actor=imported_by,
        target=filename,
        imported=imported,
        failed=len(errors),
    )
    logger.info("Imported %s: %s rows ok, %s failed", filename, imported, len(errors))
    return history


def find_orphaned_accounts(older_than):
    return User.objects.filter(
        role=User.Role.PRODUCER,
        producer__isnull=True,
        date_joined__lt=older_than,
    )
