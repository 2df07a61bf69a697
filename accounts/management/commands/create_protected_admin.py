from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from accounts.models import User


class Command(BaseCommand):
    help = "Create (or promote) the protected super administrator from PROTECTED_ADMIN_EMAIL."

    def add_arguments(self, parser):
        parser.add_argument("--password", help="Password to set when the account is created.")

    def handle(self, *args, **options):
        email = (settings.PROTECTED_ADMIN_EMAIL or "").strip().lower()
        if not email:
            raise CommandError("PROTECTED_ADMIN_EMAIL is not configured.")

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            if not options["password"]:
                raise CommandError("--password is required to create the account.")
            user = User.objects.create_user(
                username=email,
                email=email,
                password=options["password"],
                role=User.Role.SUPER_ADMIN,
                is_staff=True,
                is_superuser=True,
            )
            self.stdout.write(self.style.SUCCESS(f"Created protected super admin {email}"))
            return

        user.role = User.Role.SUPER_ADMIN
        user.save()
        self.stdout.write(self.style.SUCCESS(f"{email} is now the protected super admin"))
