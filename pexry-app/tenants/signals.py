"""
Création automatique d'une boutique pour chaque nouvel utilisateur
"""
import logging

from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Tenant

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_tenant_for_new_user(sender, instance, created, **kwargs):
    if not created or kwargs.get('raw'):
        return
    tenant = Tenant.objects.create(
        name=f"{instance.username}'s Store",
        slug=Tenant.unique_slug(instance.username),
        owner=instance,
    )
    logger.info(f"Boutique {tenant.slug} créée pour {instance.username}")
