"""
Signaux du module comptes
"""
import logging

from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver
from django.utils import timezone

from .models import UserAgent

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def track_agent_login(sender, request, user, **kwargs):
    """Horodate la dernière connexion d'un agent support"""
    updated = UserAgent.objects.filter(user=user).update(last_login_at=timezone.now())
    if updated:
        logger.info(f"Connexion de l'agent support {user.username}")
