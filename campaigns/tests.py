from datetime import timedelta

from django.db import IntegrityError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone

from accounts.models import User
from auditing.models import AuditLog
from campaigns import services
from campaigns.forms import EmailTemplateForm
from campaigns.models import Campaign, CampaignRecipient, EmailTemplate
from producers.models import Producer


class TemplateRenderingTests(SimpleTestCase):
    def test_extract_variables_keeps_first_seen_order(self) -> None:
        self.assertEqual(
            services.extract_variables("Bonjour {{ contact_name }}", "{{company_name}} / {{ contact_name }}"),
            ["contact_name", "company_name"],
        )

    def test_unknown_placeholders_are_left_untouched(self) -> None:
        rendered = services.render_template(
            "Bonjour {{ contact_name }}, {{ unknown }}",
            {"contact_name": "Jeanne"},
        )
        self.assertEqual(rendered, "Bonjour Jeanne, {{ unknown }}")


class CampaignServiceTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin@example.com", email="admin@example.com", password="pass1234", role=User.Role.ADMIN
        )
        self.template = EmailTemplate.objects.create(
            name="Bienvenue",
            subject="Bonjour {{ company_name }}",
            content="Cher {{ contact_name }}",
            created_by=self.admin,
        )
        self.ferme_a = Producer.objects.create(company_name="Ferme A", contact_name="Jeanne", email="a@example.com")
        self.ferme_b = Producer.objects.create(company_name="Ferme B", email="b@example.com")

    def _create(self, **overrides):
        kwargs = {
            "name": "Printemps",
            "description": "",
            "template": self.template,
            "producers": [self.ferme_a, self.ferme_b],
            "send_immediately": True,
            "scheduled_at": None,
            "created_by": self.admin,
        }
        kwargs.update(overrides)
        return services.create_campaign(**kwargs)

    def test_recipients_are_a_snapshot_of_the_selection(self) -> None:
        campaign = self._create()

        self.assertEqual(campaign.status, Campaign.Status.DRAFT)
        self.assertIsNone(campaign.scheduled_at)
        self.assertEqual(campaign.total_recipients, 2)
        self.assertEqual(
            set(campaign.recipients.values_list("email", "company_name", "contact_name", "status")),
            {
                ("a@example.com", "Ferme A", "Jeanne", CampaignRecipient.Status.PENDING),
                ("b@example.com", "Ferme B", "", CampaignRecipient.Status.PENDING),
            },
        )

        Producer.objects.filter(pk=self.ferme_a.pk).update(email="new@example.com", company_name="Ferme A2")
        recipient = campaign.recipients.get(producer=self.ferme_a)
        self.assertEqual((recipient.email, recipient.company_name), ("a@example.com", "Ferme A"))

    def test_empty_selection_is_refused(self) -> None:
        with self.assertRaisesMessage(services.CampaignError, services.NO_RECIPIENT_MESSAGE):
            self._create(producers=[])
        self.assertFalse(Campaign.objects.exists())

    def test_template_is_required(self) -> None:
        with self.assertRaisesMessage(services.CampaignError, services.NO_TEMPLATE_MESSAGE):
            self._create(template=None)
        self.assertFalse(Campaign.objects.exists())

    def test_scheduled_campaign_needs_a_future_date(self) -> None:
        with self.assertRaisesMessage(services.CampaignError, services.PAST_SCHEDULE_MESSAGE):
            self._create(send_immediately=False, scheduled_at=timezone.now() - timedelta(hours=1))
        with self.assertRaisesMessage(services.CampaignError, services.PAST_SCHEDULE_MESSAGE):
            self._create(send_immediately=False, scheduled_at=None)

        when = timezone.now() + timedelta(days=2)
        campaign = self._create(send_immediately=False, scheduled_at=when)
        self.assertEqual(campaign.status, Campaign.Status.SCHEDULED)
        self.assertEqual(campaign.scheduled_at, when)

    def test_resubmission_creates_a_second_campaign(self) -> None:
        self._create()
        self._create()
        self.assertEqual(Campaign.objects.count(), 2)
        self.assertEqual(CampaignRecipient.objects.count(), 4)

    def test_campaign_recipient_unique(self) -> None:
        campaign = self._create(producers=[self.ferme_a])
        with self.assertRaises(IntegrityError):
            CampaignRecipient.objects.create(campaign=campaign, producer=self.ferme_a, email=self.ferme_a.email)


class EmailTemplateTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin@example.com", email="admin@example.com", password="pass1234", role=User.Role.ADMIN
        )

    def test_variables_are_extracted_when_left_empty(self) -> None:
        form = EmailTemplateForm(
            data={"name": "Relance", "subject": "{{ company_name }}", "content": "Bonjour {{ first_name }}"}
        )
        self.assertTrue(form.is_valid(), form.errors)

        template = services.save_template(form, self.admin)

        self.assertEqual(template.variables, ["company_name", "first_name"])
        self.assertEqual(template.created_by, self.admin)

    def test_variables_typed_as_a_comma_list(self) -> None:
        form = EmailTemplateForm(
            data={"name": "Relance", "subject": "Bonjour", "content": "Texte", "variables": "prenom, , entreprise "}
        )
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(services.save_template(form, self.admin).variables, ["prenom", "entreprise"])

    def test_french_placeholders_have_sample_values(self) -> None:
        template = EmailTemplate(name="T", subject="{{entreprise}}", content="Bonjour {{prenom}} ({{email}})")
        self.assertEqual(
            services.preview_template(template),
            {"subject": "Ferme Exemple", "content": "Bonjour Jean (contact@exemple.fr)"},
        )

    def test_preview_uses_sample_values(self) -> None:
        template = EmailTemplate.objects.create(name="T", subject="Pour {{ company_name }}", content="{{ email }}")
        self.client.force_login(self.admin)

        response = self.client.get(reverse("campaigns:template-preview", args=[template.pk]))

        self.assertEqual(
            response.context["preview"],
            {"subject": "Pour Ferme Exemple", "content": "contact@exemple.fr"},
        )


class CampaignViewTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin@example.com", email="admin@example.com", password="pass1234", role=User.Role.ADMIN
        )
        self.client.force_login(self.admin)
        self.template = EmailTemplate.objects.create(name="Bienvenue", subject="Bonjour", content="Texte")

    def test_create_without_recipients_shows_error(self) -> None:
        response = self.client.post(
            reverse("campaigns:campaign-create"),
            {"name": "Printemps", "template": self.template.pk, "schedule_type": "immediate"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, services.NO_RECIPIENT_MESSAGE)
        self.assertFalse(Campaign.objects.exists())

    def test_create_and_list(self) -> None:
        producer = Producer.objects.create(company_name="Ferme A", email="a@example.com")

        response = self.client.post(
            reverse("campaigns:campaign-create"),
            {
                "name": "Printemps",
                "template": self.template.pk,
                "schedule_type": "immediate",
                "producers": [producer.pk],
            },
        )

        self.assertRedirects(response, reverse("campaigns:campaigns"))
        listing = self.client.get(reverse("campaigns:campaigns"))
        self.assertContains(listing, "Bienvenue")
        self.assertEqual(listing.context["campaigns"][0].total_recipients, 1)

    def _schedule(self, when, producer):
        return self.client.post(
            reverse("campaigns:campaign-create"),
            {
                "name": "Automne",
                "template": self.template.pk,
                "schedule_type": "scheduled",
                "scheduled_at": timezone.localtime(when).strftime("%Y-%m-%d %H:%M"),
                "producers": [producer.pk],
            },
        )

    def test_scheduled_campaign_from_the_form(self) -> None:
        producer = Producer.objects.create(company_name="Ferme A", email="a@example.com")

        response = self._schedule(timezone.now() + timedelta(days=3), producer)

        self.assertRedirects(response, reverse("campaigns:campaigns"))
        campaign = Campaign.objects.get()
        self.assertEqual(campaign.status, Campaign.Status.SCHEDULED)
        self.assertGreater(campaign.scheduled_at, timezone.now() + timedelta(days=2))

    def test_scheduled_campaign_in_the_past_is_refused(self) -> None:
        producer = Producer.objects.create(company_name="Ferme A", email="a@example.com")

        response = self._schedule(timezone.now() - timedelta(days=1), producer)

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Campaign.objects.exists())

    def test_template_delete_asks_for_confirmation_first(self) -> None:
        url = reverse("campaigns:template-delete", args=[self.template.pk])

        response = self.client.get(url)
        self.assertContains(response, "Êtes-vous sûr de vouloir supprimer ce modèle ?")
        self.assertTrue(EmailTemplate.objects.filter(pk=self.template.pk).exists())

        response = self.client.post(url)
        self.assertRedirects(response, reverse("campaigns:templates"))
        self.assertFalse(EmailTemplate.objects.filter(pk=self.template.pk).exists())
        self.assertEqual(AuditLog.objects.get().action, AuditLog.Action.TEMPLATE_DELETED)

    def test_deleting_a_template_keeps_its_campaigns(self) -> None:
        producer = Producer.objects.create(company_name="Ferme A", email="a@example.com")
        campaign = services.create_campaign(
            name="Printemps",
            description="",
            template=self.template,
            producers=[producer],
            send_immediately=True,
            scheduled_at=None,
            created_by=self.admin,
        )

        services.delete_template(self.template, self.admin)

        campaign.refresh_from_db()
        self.assertIsNone(campaign.template)
        self.assertEqual(campaign.recipients.count(), 1)
