from __future__ import annotations

from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    class Action(models.TextChoices):
        PRODUCER_REGISTERED = "producer_registered", "Inscription producteur"
        PRODUCER_CREATED = "producer_created", "Producteur créé"
        PRODUCER_UPDATED = "producer_updated", "Producteur modifié"
        PRODUCER_DELETED = "producer_deleted", "Producteur supprimé"
        PRODUCER_VISIBILITY = "producer_visibility", "Visibilité producteur"
        PRODUCER_BLOCK = "producer_block", "Blocage producteur"
        PRODUCERS_IMPORTED = "producers_imported", "Import CSV"
        TEMPLATE_SAVED = "template_saved", "Modèle enregistré"
        TEMPLATE_DELETED = "template_deleted", "Modèle supprimé"
        CAMPAIGN_CREATED = "campaign_created", "Campagne créée"
        ADMIN_CREATED = "admin_created", "Administrateur créé"
        ADMIN_DELETED = "admin_deleted", "Administrateur supprimé"
        LOGO_UPDATED = "logo_updated", "Logo mis à jour"
        PASSWORD_RESET = "password_reset", "Mot de passe réinitialisé"
        RESET_LINK_GENERATED = "reset_link_generated", "Lien de réinitialisation"
        ORPHANS_SWEPT = "orphans_swept", "Comptes orphelins supprimés"

    action = models.CharField(max_length=64, choices=Action.choices)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    target = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return f"{self.action} {self.target} ({self.created_at:%Y-%m-%d %H:%M:%S})"

    @classmethod
    def record(cls, action: str, actor=None, target: str = "", **metadata) -> "AuditLog":
        if actor is not None and not getattr(actor, "is_authenticated", False):
            actor = None
        return cls.objects.create(action=action, actor=actor, target=str(target)[:255], metadata=metadata)
