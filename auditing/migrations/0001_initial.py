import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("producer_registered", "Inscription producteur"),
                            ("producer_created", "Producteur créé"),
                            ("producer_updated", "Producteur modifié"),
                            ("producer_deleted", "Producteur supprimé"),
                            ("producer_visibility", "Visibilité producteur"),
                            ("producer_block", "Blocage producteur"),
                            ("producers_imported", "Import CSV"),
                            ("template_saved", "Modèle enregistré"),
                            ("template_deleted", "Modèle supprimé"),
                            ("campaign_created", "Campagne créée"),
                            ("admin_created", "Administrateur créé"),
                            ("admin_deleted", "Administrateur supprimé"),
                            ("logo_updated", "Logo mis à jour"),
                            ("password_reset", "Mot de passe réinitialisé"),
                            ("reset_link_generated", "Lien de réinitialisation"),
                            ("orphans_swept", "Comptes orphelins supprimés"),
                        ],
                        max_length=64,
                    ),
                ),
                ("target", models.CharField(blank=True, max_length=255)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ("-created_at",),
            },
        ),
    ]
