from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """Notification in-app, visible uniquement par son destinataire"""
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='notifications', verbose_name=_("Destinataire"))

    SALE = 'sale'
    DISPUTE_OPENED = 'dispute_opened'
    DISPUTE_RESOLVED = 'dispute_resolved'
    WITHDRAWAL_PAID = 'withdrawal_paid'
    WITHDRAWAL_REJECTED = 'withdrawal_rejected'
    MESSAGE = 'message'
    GENERAL = 'general'
    TYPE_CHOICES = [
        (SALE, 'Vente'),
        (DISPUTE_OPENED, 'Litige ouvert'),
        (DISPUTE_RESOLVED, 'Litige résolu'),
        (WITHDRAWAL_PAID, 'Retrait payé'),
        (WITHDRAWAL_REJECTED, 'Retrait rejeté'),
        (MESSAGE, 'Message'),
        (GENERAL, 'Général'),
    ]
    type = models.CharField(max_length=30, choices=TYPE_CHOICES, default=GENERAL, verbose_name=_("Type"))

    LOW = 'low'
    NORMAL = 'normal'
    HIGH = 'high'
    URGENT = 'urgent'
    PRIORITY_CHOICES = [
        (LOW, 'Basse'),
        (NORMAL, 'Normale'),
        (HIGH, 'Haute'),
        (URGENT, 'Urgente'),
    ]
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=NORMAL, verbose_name=_("Priorité"))

    title = models.CharField(max_length=200, verbose_name=_("Titre"))
    message = models.TextField(verbose_name=_("Message"))
    read = models.BooleanField(default=False, verbose_name=_("Lue"))
    read_at = models.DateTimeField(blank=True, null=True, verbose_name=_("Lue le"))
    action_url = models.CharField(max_length=500, blank=True, null=True, verbose_name=_("Lien d'action"))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_("Métadonnées"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    class Meta:
        ordering = ('-created_at',)
        verbose_name = _("Notification")
        verbose_name_plural = _("Notifications")
        indexes = [
            models.Index(fields=['user', 'read'], name='notif_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.title} - {self.user.username}"

    def mark_as_read(self):
        if not self.read:
            self.read = True
            self.read_at = timezone.now()
            self.save(update_fields=['read', 'read_at', 'updated_at'])
