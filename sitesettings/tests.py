import shutil
import tempfile

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse

from accounts.models import User
from auditing.models import AuditLog
from sitesettings import services
from sitesettings.models import SiteSetting

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


@override_settings(DEFAULT_LOGO_URL="/static/default-logo.jpg")
class LogoUrlTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.admin = User.objects.create_user(
            username="admin@example.com", email="admin@example.com", password="pass1234", role=User.Role.ADMIN
        )

    def test_default_logo_when_nothing_stored(self) -> None:
        self.assertEqual(services.get_logo_url(), "/static/default-logo.jpg")

    def test_logo_is_read_once_then_cached(self) -> None:
        SiteSetting.objects.create(key=SiteSetting.LOGO_URL, value="/media/logos/a.png")

        with self.assertNumQueries(1):
            self.assertEqual(services.get_logo_url(), "/media/logos/a.png")
        with self.assertNumQueries(0):
            self.assertEqual(services.get_logo_url(), "/media/logos/a.png")

    def test_new_logo_is_served_without_waiting_for_expiry(self) -> None:
        services.get_logo_url()
        services.set_logo_url("/media/logos/b.png", self.admin)

        with self.assertNumQueries(0):
            self.assertEqual(services.get_logo_url(), "/media/logos/b.png")
        self.assertEqual(AuditLog.objects.get().action, AuditLog.Action.LOGO_UPDATED)

    def test_pages_render_the_current_logo(self) -> None:
        services.set_logo_url("/media/logos/c.png", self.admin)
        response = self.client.get(reverse("producers:landing"))
        self.assertContains(response, "/media/logos/c.png")


class LogoUploadTests(TestCase):
    def setUp(self) -> None:
        cache.clear()
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        admin = User.objects.create_user(
            username="admin@example.com", email="admin@example.com", password="pass1234", role=User.Role.ADMIN
        )
        self.client.force_login(admin)

    def _upload(self, name: str, content: bytes, content_type: str):
        return self.client.post(
            reverse("sitesettings:settings"),
            {"logo": SimpleUploadedFile(name, content, content_type=content_type)},
        )

    def test_non_image_is_rejected(self) -> None:
        response = self._upload("notes.txt", b"hello", "text/plain")
        self.assertContains(response, "Veuillez sélectionner un fichier image")
        self.assertFalse(SiteSetting.objects.exists())

    @override_settings(LOGO_MAX_UPLOAD_BYTES=10)
    def test_oversized_image_is_rejected(self) -> None:
        response = self._upload("logo.png", PNG_BYTES, "image/png")
        self.assertContains(response, "Le fichier doit faire moins de 5 MB")
        self.assertFalse(SiteSetting.objects.exists())

    def test_image_is_stored_and_becomes_the_logo(self) -> None:
        with self.settings(MEDIA_ROOT=self.media_root):
            response = self._upload("Logo.PNG", PNG_BYTES, "image/png")

            self.assertRedirects(response, reverse("sitesettings:settings"))
            url = SiteSetting.objects.get(key=SiteSetting.LOGO_URL).value
            self.assertTrue(url.startswith("/media/logos/logo-"))
            self.assertTrue(url.endswith(".png"))
            self.assertEqual(services.get_logo_url(), url)
