from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


class ProtectedAccountError(Exception):
    """Raised when the protected super administrator would be deleted or demoted."""


class User(AbstractUser):
    class Role(models.TextChoices):
        ADMIN = "admin", "Administrateur"
        SUPER_ADMIN = "super_admin", "Super administrateur"
        PRODUCER = "producer", "Producteur"

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=32, choices=Role.choices, default=Role.PRODUCER)
    is_protected = models.BooleanField(default=False, editable=False)

    @property
    def is_admin(self) -> bool:
        return self.role in {self.Role.ADMIN, self.Role.SUPER_ADMIN}

    @property
    def is_super_admin(self) -> bool:
        return self.role == self.Role.SUPER_ADMIN

    @property
    def is_producer(self) -> bool:
        return self.role == self.Role.PRODUCER

    def save(self, *args, **kwargs) -> None:
        protected_email = (settings.PROTECTED_ADMIN_EMAIL or "").lower()
        if (
            protected_email
            and self.role == self.Role.SUPER_ADMIN
            and (self.email or "").lower() == protected_email
        ):
            self.is_protected = True
        if self.is_protected and self.role != self.Role.SUPER_ADMIN:
            raise ProtectedAccountError("Impossible de modifier le rôle du super administrateur principal")
        super().save(*args, **kwargs)
