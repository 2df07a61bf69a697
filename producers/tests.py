from datetime import timedelta
from itertools import permutations
from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone

from auditing.models import AuditLog
from producers import services
from producers.filters import (
    DirectoryFilter,
    filter_producers,
    matches_category,
    matches_region,
    matches_search,
)
from producers.forms import (
    CHARTER_REQUIRED_MESSAGE,
    PASSWORD_MISMATCH_MESSAGE,
    PASSWORD_TOO_SHORT_MESSAGE,
    RegistrationForm,
)
from producers.models import ImportHistory, Producer
from producers.tasks import sweep_orphaned_producer_accounts

User = get_user_model()


def _producer(name, region="", categories=(), products=(), description=""):
    return Producer(
        company_name=name,
        email=f"{name.lower().replace(' ', '-')}@example.com",
        region=region,
        categories=list(categories),
        products=list(products),
        description=description,
    )


class DirectoryFilterTests(SimpleTestCase):
    def setUp(self) -> None:
        self.ferme_a = _producer("Ferme A", region="Bretagne", categories=["Fruits et Légumes"])
        self.ferme_b = _producer("Ferme B", region="Île-de-France", categories=["Boissons"])
        self.directory = [self.ferme_a, self.ferme_b]

    def test_region_category_and_search_scenario(self) -> None:
        self.assertEqual(filter_producers(self.directory, region="Bretagne"), [self.ferme_a])
        self.assertEqual(filter_producers(self.directory, category="Boissons"), [self.ferme_b])
        self.assertEqual(filter_producers(self.directory, search="Ferme"), [self.ferme_a, self.ferme_b])

    def test_empty_predicates_pass_everything(self) -> None:
        self.assertEqual(filter_producers(self.directory), self.directory)
        self.assertFalse(DirectoryFilter().is_active)

    def test_search_covers_products_and_description_case_insensitively(self) -> None:
        cidre = _producer("Domaine C", products=["Cidre brut", "Jus de pomme"])
        miel = _producer("Rucher D", description="Miel de CHÂTAIGNIER")
        directory = [cidre, miel, self.ferme_a]

        self.assertEqual(filter_producers(directory, search="CIDRE"), [cidre])
        self.assertEqual(filter_producers(directory, search="châtaignier"), [miel])
        self.assertEqual(filter_producers(directory, search="absent"), [])

    def test_missing_fields_never_match(self) -> None:
        bare = SimpleNamespace(company_name=None, products=None, description=None, region=None, categories=None)
        self.assertFalse(matches_search(bare, "ferme"))
        self.assertFalse(matches_region(bare, "Bretagne"))
        self.assertFalse(matches_category(bare, "Boissons"))
        self.assertTrue(DirectoryFilter().matches(bare))

    def test_predicate_order_does_not_matter(self) -> None:
        directory = [
            _producer("Ferme A", "Bretagne", ["Boissons", "Fruits et Légumes"], ["Cidre"]),
            _producer("Ferme B", "Bretagne", ["Produits Laitiers"], ["Beurre"]),
            _producer("Cave C", "Occitanie", ["Boissons"], ["Vin"], "Ferme viticole"),
            _producer("Laiterie D", "Bretagne", ["Boissons"], [], "Lait de ferme"),
        ]
        criteria = [
            ("ferme", "Bretagne", "Boissons"),
            ("", "Bretagne", "Boissons"),
            ("ferme", "", "Boissons"),
            ("cidre", "Occitanie", ""),
        ]
        for search, region, category in criteria:
            steps = [
                lambda items, s=search: filter_producers(items, search=s),
                lambda items, r=region: filter_producers(items, region=r),
                lambda items, c=category: filter_producers(items, category=c),
            ]
            expected = filter_producers(directory, search=search, region=region, category=category)
            for order in permutations(steps):
                result = directory
                for step in order:
                    result = step(result)
                self.assertEqual(result, expected, (search, region, category))

    def test_from_query_strips_values(self) -> None:
        directory_filter = DirectoryFilter.from_query({"q": "  miel ", "region": "Corse"})
        self.assertEqual(directory_filter, DirectoryFilter(search="miel", region="Corse", category=""))
        self.assertTrue(directory_filter.is_active)


class DirectoryViewTests(TestCase):
    def test_landing_counts_every_producer(self) -> None:
        Producer.objects.create(company_name="Ferme A", email="a@example.com")
        Producer.objects.create(company_name="Ferme Cachée", email="c@example.com", is_visible=False)

        response = self.client.get(reverse("producers:landing"))

        self.assertEqual(response.context["producer_count"], 2)

    def test_only_visible_producers_are_listed(self) -> None:
        Producer.objects.create(company_name="Ferme A", email="a@example.com", region="Bretagne")
        Producer.objects.create(company_name="Ferme Cachée", email="c@example.com", is_visible=False)

        response = self.client.get(reverse("producers:directory"), {"q": "ferme"})

        self.assertEqual([p.company_name for p in response.context["producers"]], ["Ferme A"])
        self.assertEqual(response.context["total"], 1)


REGISTRATION = {
    "company_name": "Ferme A",
    "contact_name": "Jeanne Martin",
    "email": "Contact@Ferme-A.fr",
    "password": "secret123",
    "password_confirm": "secret123",
    "city": "Rennes",
    "region": "Bretagne",
    "products": "Pommes, , Cidre ,Jus",
    "categories": ["Fruits et Légumes", "Boissons"],
    "charter_accepted": "on",
}


class RegistrationFormTests(TestCase):
    def _errors(self, **overrides):
        form = RegistrationForm(data={**REGISTRATION, **overrides})
        self.assertFalse(form.is_valid())
        return form.non_field_errors()

    def test_charter_must_be_accepted(self) -> None:
        data = dict(REGISTRATION)
        data.pop("charter_accepted")
        form = RegistrationForm(data=data)
        self.assertFalse(form.is_valid())
        self.assertEqual(form.non_field_errors(), [CHARTER_REQUIRED_MESSAGE])

    def test_password_confirmation_must_match(self) -> None:
        self.assertEqual(self._errors(password_confirm="different"), [PASSWORD_MISMATCH_MESSAGE])

    def test_password_needs_six_characters(self) -> None:
        self.assertEqual(self._errors(password="abc", password_confirm="abc"), [PASSWORD_TOO_SHORT_MESSAGE])

    def test_products_are_split_and_trimmed(self) -> None:
        form = RegistrationForm(data=REGISTRATION)
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["products"], ["Pommes", "Cidre", "Jus"])

    def test_rejected_registrations_write_nothing(self) -> None:
        data = dict(REGISTRATION)
        data.pop("charter_accepted")
        self.client.post(reverse("producers:register"), data)
        self.client.post(reverse("producers:register"), {**REGISTRATION, "password_confirm": "nope"})

        self.assertFalse(User.objects.exists())
        self.assertFalse(Producer.objects.exists())


class RegistrationFlowTests(TestCase):
    def _cleaned(self, **overrides):
        form = RegistrationForm(data={**REGISTRATION, **overrides})
        self.assertTrue(form.is_valid(), form.errors)
        return form.cleaned_data

    def test_registration_creates_account_and_visible_producer(self) -> None:
        producer = services.register_producer(self._cleaned())

        self.assertEqual(producer.email, "contact@ferme-a.fr")
        self.assertTrue(producer.is_visible)
        self.assertEqual(producer.products, ["Pommes", "Cidre", "Jus"])
        self.assertEqual(producer.categories, ["Fruits et Légumes", "Boissons"])
        self.assertEqual(producer.user.role, User.Role.PRODUCER)
        self.assertTrue(producer.user.check_password("secret123"))

    def test_duplicate_email_is_reported_and_nothing_is_left_behind(self) -> None:
        Producer.objects.create(company_name="Import", email="contact@ferme-a.fr", is_visible=False)

        with self.assertRaisesMessage(services.RegistrationError, "Cette adresse email est déjà enregistrée"):
            services.register_producer(self._cleaned())

        self.assertFalse(User.objects.exists())
        self.assertEqual(Producer.objects.count(), 1)

    def test_view_leaves_browser_signed_out(self) -> None:
        response = self.client.post(reverse("producers:register"), REGISTRATION)

        self.assertContains(response, "Inscription réussie")
        self.assertNotIn("_auth_user_id", self.client.session)
        self.assertTrue(Producer.objects.filter(email="contact@ferme-a.fr").exists())

    def test_view_shows_duplicate_message(self) -> None:
        self.client.post(reverse("producers:register"), REGISTRATION)
        response = self.client.post(reverse("producers:register"), REGISTRATION)

        self.assertContains(response, "Cette adresse email est déjà enregistrée")
        self.assertEqual(User.objects.count(), 1)


class CsvImportTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin@example.com", email="admin@example.com", password="secret123", role=User.Role.ADMIN
        )

    def test_rows_are_imported_hidden_with_aliases_and_quotes(self) -> None:
        content = (
            "entreprise,contact,mail,ville,region,description\n"
            '"Ferme A, la vraie",Jeanne,a@example.com,Rennes,Bretagne,"Pommes, poires"\n'
            "\n"
            ",Paul,b@example.com,Lyon,Auvergne-Rhône-Alpes,\n"
        ).encode("utf-8")

        history = services.import_producers_csv(content, filename="producteurs.csv", imported_by=self.admin)

        self.assertEqual((history.total_rows, history.imported_rows, history.failed_rows), (2, 2, 0))
        first = Producer.objects.get(email="a@example.com")
        self.assertEqual(first.company_name, "Ferme A, la vraie")
        self.assertEqual(first.description, "Pommes, poires")
        self.assertFalse(first.is_visible)
        self.assertEqual(Producer.objects.get(email="b@example.com").company_name, services.UNSPECIFIED_COMPANY)

    def test_empty_email_rows_are_still_attempted(self) -> None:
        content = "company_name,email\nFerme A,\nFerme B,\n"

        history = services.import_producers_csv(content, filename="vide.csv", imported_by=self.admin)

        # The first empty email goes in; the second collides with it.
        self.assertTrue(Producer.objects.filter(company_name="Ferme A", email="").exists())
        self.assertEqual((history.imported_rows, history.failed_rows), (1, 1))
        self.assertEqual(history.errors[0]["line"], 3)
        self.assertEqual(history.imported_by, self.admin)

    def test_upload_view_records_history(self) -> None:
        self.client.force_login(self.admin)
        upload = SimpleUploadedFile("liste.csv", b"company_name,email\nFerme A,a@example.com\n", content_type="text/csv")

        response = self.client.post(reverse("producers:import"), {"file": upload})

        self.assertRedirects(response, reverse("producers:import"))
        self.assertEqual(ImportHistory.objects.get().imported_rows, 1)

    def test_preview_shows_first_rows_then_confirm_imports(self) -> None:
        self.client.force_login(self.admin)
        lines = ["company_name,email"] + [f"Ferme {i},f{i}@example.com" for i in range(1, 8)]
        upload = SimpleUploadedFile("liste.csv", "\n".join(lines).encode("utf-8"), content_type="text/csv")

        response = self.client.post(reverse("producers:import"), {"file": upload, "preview": "1"})

        self.assertEqual(response.context["preview"]["headers"], ["company_name", "email"])
        self.assertEqual(len(response.context["preview"]["rows"]), 5)
        self.assertEqual(response.context["preview"]["rows"][0], ["Ferme 1", "f1@example.com"])
        self.assertFalse(Producer.objects.exists())
        self.assertFalse(ImportHistory.objects.exists())

        response = self.client.post(reverse("producers:import"), {"confirm": "1"})

        self.assertRedirects(response, reverse("producers:import"))
        history = ImportHistory.objects.get()
        self.assertEqual((history.filename, history.imported_rows), ("liste.csv", 7))
        self.assertEqual(Producer.objects.count(), 7)

    def test_confirm_without_preview_imports_nothing(self) -> None:
        self.client.force_login(self.admin)
        response = self.client.post(reverse("producers:import"), {"confirm": "1"})
        self.assertRedirects(response, reverse("producers:import"))
        self.assertFalse(ImportHistory.objects.exists())

    def test_preview_keeps_quoted_values_whole(self) -> None:
        headers, rows = services.preview_csv('company_name,city\n"Ferme A, la vraie",Rennes\n')
        self.assertEqual(headers, ["company_name", "city"])
        self.assertEqual(rows, [["Ferme A, la vraie", "Rennes"]])

    def test_non_csv_upload_is_rejected(self) -> None:
        self.client.force_login(self.admin)
        upload = SimpleUploadedFile("liste.xlsx", b"binary", content_type="application/vnd.ms-excel")

        response = self.client.post(reverse("producers:import"), {"file": upload})

        self.assertContains(response, "Veuillez sélectionner un fichier CSV valide")
        self.assertFalse(ImportHistory.objects.exists())

    def test_template_download(self) -> None:
        self.client.force_login(self.admin)
        response = self.client.get(reverse("producers:import-template"))
        self.assertEqual(response["Content-Disposition"], 'attachment; filename="template_import_producteurs.csv"')
        self.assertTrue(response.content.decode("utf-8").startswith("company_name,contact_name,email"))


class AdminProducerViewsTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin@example.com", email="admin@example.com", password="secret123", role=User.Role.ADMIN
        )
        self.client.force_login(self.admin)
        self.producer = Producer.objects.create(company_name="Ferme A", email="a@example.com")

    def test_admin_created_producer_is_hidden(self) -> None:
        self.client.post(
            reverse("producers:dashboard"),
            {"company_name": "Ferme B", "email": "b@example.com", "region": "Corse"},
        )
        self.assertFalse(Producer.objects.get(email="b@example.com").is_visible)

    def test_edit_updates_the_producer_by_id(self) -> None:
        url = reverse("producers:producer-edit", args=[self.producer.pk])
        self.assertEqual(self.client.get(url).context["form"].instance, self.producer)

        response = self.client.post(
            url,
            {"company_name": "Ferme A bio", "email": "a@example.com", "city": "Rennes", "region": "Bretagne"},
        )

        self.assertRedirects(response, reverse("producers:dashboard"))
        self.producer.refresh_from_db()
        self.assertEqual((self.producer.company_name, self.producer.city), ("Ferme A bio", "Rennes"))
        self.assertTrue(self.producer.is_visible)
        self.assertEqual(AuditLog.objects.get().action, AuditLog.Action.PRODUCER_UPDATED)

    def test_edit_of_missing_producer_is_404(self) -> None:
        response = self.client.get(reverse("producers:producer-edit", args=[self.producer.pk + 100]))
        self.assertEqual(response.status_code, 404)

    def test_toggles_change_a_single_flag(self) -> None:
        self.client.post(reverse("producers:producer-visibility", args=[self.producer.pk]))
        self.producer.refresh_from_db()
        self.assertFalse(self.producer.is_visible)
        self.assertFalse(self.producer.is_blocked)

        self.client.post(reverse("producers:producer-block", args=[self.producer.pk]))
        self.producer.refresh_from_db()
        self.assertTrue(self.producer.is_blocked)
        self.assertFalse(self.producer.is_visible)

    def test_delete_asks_for_confirmation_first(self) -> None:
        response = self.client.get(reverse("producers:producer-delete", args=[self.producer.pk]))
        self.assertContains(response, "Êtes-vous sûr de vouloir supprimer ce producteur ?")
        self.assertTrue(Producer.objects.filter(pk=self.producer.pk).exists())

        self.client.post(reverse("producers:producer-delete", args=[self.producer.pk]))
        self.assertFalse(Producer.objects.filter(pk=self.producer.pk).exists())

    def test_dashboard_stats(self) -> None:
        Producer.objects.create(company_name="Ferme B", email="b@example.com", is_visible=False, is_blocked=True)
        response = self.client.get(reverse("producers:dashboard"))
        self.assertEqual(response.context["stats"], {"total": 2, "visible": 1, "hidden": 1, "blocked": 1})


class ProducerProfileTests(TestCase):
    def test_producer_edits_own_profile(self) -> None:
        user = User.objects.create_user(username="a@example.com", email="a@example.com", password="secret123")
        producer = Producer.objects.create(user=user, company_name="Ferme A", email=user.email)
        self.client.force_login(user)

        response = self.client.post(
            reverse("producers:profile"),
            {
                "company_name": "Ferme A bio",
                "products": "Beurre, Crème",
                "categories": ["Produits Laitiers"],
                "region": "Normandie",
            },
        )

        self.assertRedirects(response, reverse("producers:profile"))
        producer.refresh_from_db()
        self.assertEqual(producer.company_name, "Ferme A bio")
        self.assertEqual(producer.products, ["Beurre", "Crème"])
        self.assertEqual(producer.categories, ["Produits Laitiers"])
        self.assertFalse(producer.is_visible)
        self.assertEqual(producer.email, "a@example.com")


class OrphanSweepTests(TestCase):
    def _user(self, email, role=User.Role.PRODUCER, age_minutes=0):
        user = User.objects.create_user(username=email, email=email, password="secret123", role=role)
        User.objects.filter(pk=user.pk).update(date_joined=timezone.now() - timedelta(minutes=age_minutes))
        return user

    def test_only_old_producer_accounts_without_producer_are_removed(self) -> None:
        orphan = self._user("orphan@example.com", age_minutes=120)
        recent = self._user("recent@example.com", age_minutes=5)
        owner = self._user("owner@example.com", age_minutes=120)
        Producer.objects.create(user=owner, company_name="Ferme", email=owner.email)
        admin = self._user("admin@example.com", role=User.Role.ADMIN, age_minutes=120)

        self.assertEqual(sweep_orphaned_producer_accounts(), 1)

        self.assertFalse(User.objects.filter(pk=orphan.pk).exists())
        self.assertEqual(set(User.objects.values_list("pk", flat=True)), {recent.pk, owner.pk, admin.pk})
        entry = AuditLog.objects.get(action=AuditLog.Action.ORPHANS_SWEPT)
        self.assertEqual(entry.metadata, {"emails": ["orphan@example.com"]})
        self.assertIsNone(entry.actor)
