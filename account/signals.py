from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import User, UserRole


@receiver(post_save, sender=User)
def _assign_default_role(sender, instance: User, created, **kwargs):
    # every new account starts as a viewer
    if not created:
        return
    UserRole.objects.get_or_create(user=instance, role=UserRole.Role.VIEWER)
