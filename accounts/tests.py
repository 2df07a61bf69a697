import json
from unittest import mock
from urllib.parse import urlparse

from django.db import transaction
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts import services
from accounts.models import ProtectedAccountError, User
from producers.models import Producer

PROTECTED_EMAIL = "boss@mifmarket.fr"


def make_user(email: str, role: str = User.Role.PRODUCER, password: str = "secret123") -> User:
    return User.objects.create_user(username=email, email=email, password=password, role=role)


class UserRoleTests(TestCase):
    def test_role_helpers(self) -> None:
        admin = make_user("admin@example.com", User.Role.ADMIN)
        super_admin = make_user("super@example.com", User.Role.SUPER_ADMIN)
        producer = make_user("ferme@example.com")

        self.assertTrue(admin.is_admin)
        self.assertFalse(admin.is_super_admin)
        self.assertFalse(admin.is_producer)

        self.assertTrue(super_admin.is_admin)
        self.assertTrue(super_admin.is_super_admin)

        self.assertTrue(producer.is_producer)
        self.assertFalse(producer.is_admin)


@override_settings(PROTECTED_ADMIN_EMAIL=PROTECTED_EMAIL)
class ProtectedAdminTests(TestCase):
    def setUp(self) -> None:
        self.protected = make_user(PROTECTED_EMAIL, User.Role.SUPER_ADMIN)
        self.other_super = make_user("other@mifmarket.fr", User.Role.SUPER_ADMIN)

    def test_protected_flag_follows_configured_email(self) -> None:
        self.assertTrue(self.protected.is_protected)
        self.assertFalse(self.other_super.is_protected)

    def test_model_delete_is_refused(self) -> None:
        with self.assertRaises(ProtectedAccountError), transaction.atomic():
            self.protected.delete()
        with self.assertRaises(ProtectedAccountError), transaction.atomic():
            User.objects.filter(pk=self.protected.pk).delete()
        self.assertTrue(User.objects.filter(pk=self.protected.pk).exists())

    def test_demotion_is_refused(self) -> None:
        self.protected.role = User.Role.ADMIN
        with self.assertRaises(ProtectedAccountError):
            self.protected.save()

    def test_service_refuses_before_any_delete_call(self) -> None:
        with mock.patch.object(User, "delete") as delete:
            with self.assertRaises(ProtectedAccountError):
                services.delete_admin(self.protected, deleted_by=self.other_super)
        delete.assert_not_called()

    def test_delete_view_refuses_protected_admin(self) -> None:
        self.client.force_login(self.other_super)
        response = self.client.post(reverse("accounts:admin-delete", args=[self.protected.pk]))
        self.assertRedirects(response, reverse("accounts:admins"))
        self.assertTrue(User.objects.filter(pk=self.protected.pk).exists())

    def test_bulk_delete_in_django_admin_is_refused_for_protected_account(self) -> None:
        staff = User.objects.create_superuser(
            username="staff@mifmarket.fr", email="staff@mifmarket.fr", password="pass1234"
        )
        self.client.force_login(staff)

        response = self.client.post(
            reverse("admin:accounts_user_changelist"),
            {
                "action": "delete_selected",
                "_selected_action": [self.protected.pk, self.other_super.pk],
                "post": "yes",
            },
        )

        self.assertEqual(response.status_code, 403)
        self.assertTrue(User.objects.filter(pk=self.protected.pk).exists())
        self.assertTrue(User.objects.filter(pk=self.other_super.pk).exists())

    def test_delete_view_removes_other_admin(self) -> None:
        admin = make_user("admin@mifmarket.fr", User.Role.ADMIN)
        self.client.force_login(self.protected)

        confirm = self.client.get(reverse("accounts:admin-delete", args=[admin.pk]))
        self.assertContains(confirm, "Êtes-vous sûr de vouloir supprimer cet administrateur ?")
        self.assertTrue(User.objects.filter(pk=admin.pk).exists())

        self.client.post(reverse("accounts:admin-delete", args=[admin.pk]))
        self.assertFalse(User.objects.filter(pk=admin.pk).exists())


class AdminPagesTests(TestCase):
    def test_anonymous_user_is_sent_to_login(self) -> None:
        response = self.client.get(reverse("producers:dashboard"))
        self.assertRedirects(response, reverse("accounts:login"))

    def test_producer_is_signed_out_from_admin_pages(self) -> None:
        producer = make_user("ferme@example.com")
        self.client.force_login(producer)

        response = self.client.get(reverse("campaigns:campaigns"))

        self.assertRedirects(response, reverse("accounts:login"))
        self.assertNotIn("_auth_user_id", self.client.session)

    def test_plain_admin_cannot_manage_admins(self) -> None:
        self.client.force_login(make_user("admin@example.com", User.Role.ADMIN))
        response = self.client.get(reverse("accounts:admins"))
        self.assertRedirects(response, reverse("producers:dashboard"))

    def test_super_admin_creates_admin(self) -> None:
        self.client.force_login(make_user("super@example.com", User.Role.SUPER_ADMIN))
        response = self.client.post(
            reverse("accounts:admins"),
            {"email": "New@Example.com", "password": "secret123", "role": User.Role.ADMIN},
        )
        self.assertRedirects(response, reverse("accounts:admins"))
        created = User.objects.get(email="new@example.com")
        self.assertEqual(created.role, User.Role.ADMIN)
        self.assertTrue(created.check_password("secret123"))

    def test_duplicate_admin_email_is_reported(self) -> None:
        super_admin = make_user("super@example.com", User.Role.SUPER_ADMIN)
        with self.assertRaisesMessage(services.AccountError, services.DUPLICATE_EMAIL_MESSAGE):
            services.create_admin(
                email="super@example.com",
                password="secret123",
                role=User.Role.ADMIN,
                created_by=super_admin,
            )


class LoginTests(TestCase):
    def test_admin_lands_on_dashboard(self) -> None:
        make_user("admin@example.com", User.Role.ADMIN)
        response = self.client.post(
            reverse("accounts:login"),
            {"username": "admin@example.com", "password": "secret123"},
        )
        self.assertRedirects(response, reverse("producers:dashboard"))

    def test_producer_lands_on_profile(self) -> None:
        user = make_user("ferme@example.com")
        Producer.objects.create(user=user, company_name="Ferme A", email=user.email)
        response = self.client.post(
            reverse("accounts:login"),
            {"username": "ferme@example.com", "password": "secret123"},
        )
        self.assertRedirects(response, reverse("producers:profile"))

    def test_email_is_matched_whatever_its_case(self) -> None:
        user = services.create_account("Contact@Ferme-A.fr", "secret123", User.Role.PRODUCER)
        Producer.objects.create(user=user, company_name="Ferme A", email=user.email)
        response = self.client.post(
            reverse("accounts:login"),
            {"username": " Contact@Ferme-A.fr", "password": "secret123"},
        )
        self.assertRedirects(response, reverse("producers:profile"))
        self.assertEqual(int(self.client.session["_auth_user_id"]), user.pk)

    def test_blocked_producer_is_refused(self) -> None:
        user = make_user("ferme@example.com")
        Producer.objects.create(user=user, company_name="Ferme A", email=user.email, is_blocked=True)
        response = self.client.post(
            reverse("accounts:login"),
            {"username": "ferme@example.com", "password": "secret123"},
        )
        self.assertRedirects(response, reverse("accounts:login"))
        self.assertNotIn("_auth_user_id", self.client.session)


@override_settings(EMERGENCY_RESET_SECRET="s3cret")
class AdminResetPasswordBridgeTests(TestCase):
    url = "/functions/v1/admin-reset-password"

    def _post(self, payload, secret="s3cret"):
        extra = {"HTTP_X_RESET_SECRET": secret} if secret else {}
        return self.client.post(self.url, data=json.dumps(payload), content_type="application/json", **extra)

    def test_preflight_answers_with_cors_headers(self) -> None:
        response = self.client.options(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Access-Control-Allow-Origin"], "*")

    def test_missing_secret_is_forbidden(self) -> None:
        response = self._post({"email": "a@example.com", "newPassword": "x"}, secret=None)
        self.assertEqual(response.status_code, 403)

    @override_settings(EMERGENCY_RESET_SECRET="")
    def test_endpoint_is_disabled_without_configured_secret(self) -> None:
        response = self._post({"email": "a@example.com", "newPassword": "x"}, secret="")
        self.assertEqual(response.status_code, 403)

    def test_missing_fields(self) -> None:
        response = self._post({"email": "a@example.com"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Email et nouveau mot de passe requis"})

    def test_unknown_email(self) -> None:
        response = self._post({"email": "nobody@example.com", "newPassword": "newsecret"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response["Access-Control-Allow-Origin"], "*")

    def test_password_is_updated(self) -> None:
        user = make_user("ferme@example.com")
        response = self._post({"email": "ferme@example.com", "newPassword": "newsecret"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        user.refresh_from_db()
        self.assertTrue(user.check_password("newsecret"))

    def test_malformed_body(self) -> None:
        response = self.client.post(
            self.url, data="{not json", content_type="application/json", HTTP_X_RESET_SECRET="s3cret"
        )
        self.assertEqual(response.status_code, 400)


class GenerateResetLinkBridgeTests(TestCase):
    url = "/functions/v1/generate-reset-link"

    def _post(self, payload):
        return self.client.post(self.url, data=json.dumps(payload), content_type="application/json")

    def test_missing_email(self) -> None:
        response = self._post({})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Email requis"})

    def test_unknown_email_is_a_server_error(self) -> None:
        response = self._post({"email": "nobody@example.com"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Utilisateur non trouvé"})

    def test_link_resets_password_and_honours_redirect(self) -> None:
        user = make_user("ferme@example.com")
        response = self._post({"email": "ferme@example.com", "redirectTo": "/directory/"})
        self.assertEqual(response.status_code, 200)
        link = response.json()["resetLink"]
        self.assertTrue(link.startswith("http://localhost:8000/reset/"))

        parsed = urlparse(link)
        landing = self.client.get(f"{parsed.path}?{parsed.query}")
        self.assertEqual(landing.status_code, 302)
        form_page = self.client.get(landing["Location"])
        self.assertTrue(form_page.context["validlink"])

        done = self.client.post(
            landing["Location"],
            {"new_password1": "brandnew1", "new_password2": "brandnew1"},
        )
        self.assertRedirects(done, "/directory/", fetch_redirect_response=False)
        user.refresh_from_db()
        self.assertTrue(user.check_password("brandnew1"))


@override_settings(EMERGENCY_RESET_SECRET="s3cret", PROTECTED_ADMIN_EMAIL=PROTECTED_EMAIL)
class EmergencyResetPageTests(TestCase):
    url = "/emergency-reset/"

    def setUp(self) -> None:
        self.admin = make_user(PROTECTED_EMAIL, User.Role.SUPER_ADMIN)

    def _post(self, **overrides):
        data = {
            "secret": "s3cret",
            "email": PROTECTED_EMAIL,
            "new_password": "brandnew1",
            "confirm_password": "brandnew1",
        }
        data.update(overrides)
        return self.client.post(self.url, data)

    def test_form_defaults_to_protected_admin(self) -> None:
        response = self.client.get(self.url)
        self.assertEqual(response.context["form"]["email"].value(), PROTECTED_EMAIL)
        self.assertEqual(self.client.get("/admin/quick-reset/").status_code, 200)

    def test_password_is_reset_with_the_right_secret(self) -> None:
        response = self._post()
        self.assertContains(response, "Mot de passe mis à jour avec succès")
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password("brandnew1"))

    def test_wrong_secret_changes_nothing(self) -> None:
        response = self._post(secret="guess")
        self.assertContains(response, "Accès refusé")
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password("secret123"))

    @override_settings(EMERGENCY_RESET_SECRET="")
    def test_page_is_disabled_without_configured_secret(self) -> None:
        response = self._post()
        self.assertContains(response, "Accès refusé")
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password("secret123"))

    def test_confirmation_and_length_are_checked(self) -> None:
        response = self._post(confirm_password="other")
        self.assertContains(response, "Les mots de passe ne correspondent pas")
        response = self._post(new_password="abc", confirm_password="abc")
        self.assertContains(response, "Le mot de passe doit contenir au moins 6 caractères")
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.check_password("secret123"))

    def test_unknown_email(self) -> None:
        response = self._post(email="nobody@example.com")
        self.assertContains(response, "Utilisateur non trouvé")
