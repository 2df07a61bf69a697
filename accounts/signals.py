from django.db.models.signals import pre_delete
from django.dispatch import receiver

from accounts.models import ProtectedAccountError, User


@receiver(pre_delete, sender=User)
def refuse_protected_delete(sender, instance, **kwargs):
    if instance.is_protected:
        raise ProtectedAccountError("Impossible de supprimer le super administrateur principal")
