"""
Modèles des paiements : journal des webhooks NOWPayments et demandes de retrait vendeur
"""
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from orders.models import Order


class PaymentWebhookLog(models.Model):
    """
    Log des webhooks NOWPayments pour le débogage et l'audit
    Une ligne par livraison reçue, même ignorée
    """
    order = models.ForeignKey(
        Order, on_delete=models.SET_NULL, blank=True, null=True, related_name='webhook_logs',
        verbose_name=_("Commande"))
    payload = models.JSONField(default=dict, verbose_name=_("Payload reçu"))
    content_type = models.CharField(max_length=100, blank=True, verbose_name=_("Content-Type"))
    payment_status = models.CharField(max_length=50, blank=True, null=True, verbose_name=_("Statut du paiement"))
    order_reference = models.CharField(
        max_length=100, blank=True, null=True, verbose_name=_("order_id reçu"))
    payment_id = models.CharField(max_length=100, blank=True, null=True, verbose_name=_("payment_id reçu"))
    signature = models.CharField(max_length=200, blank=True, null=True, verbose_name=_("Signature"))
    is_valid = models.BooleanField(default=False, verbose_name=_("Signature valide"))
    processed = models.BooleanField(default=False, verbose_name=_("Traité"))
    error_message = models.TextField(blank=True, null=True, verbose_name=_("Message d'erreur"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de réception"))

    class Meta:
        ordering = ('-created_at',)
        verbose_name = _("Log Webhook NOWPayments")
        verbose_name_plural = _("Logs Webhooks NOWPayments")

    def __str__(self):
        return f"Webhook {self.order_reference or '?'} ({self.payment_status}) - {self.created_at}"


class WithdrawalRequest(models.Model):
    """Demande de retrait des gains vendeur vers son adresse USDT"""
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='withdrawal_requests', verbose_name=_("Vendeur"))
    amount = models.DecimalField(
        max_digits=12, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        verbose_name=_("Montant"))

    PENDING = 'pending'
    APPROVED = 'approved'
    PAID = 'paid'
    REJECTED = 'rejected'
    STATUS_CHOICES = [
        (PENDING, 'En attente'),
        (APPROVED, 'Approuvée'),
        (PAID, 'Payée'),
        (REJECTED, 'Rejetée'),
    ]
    OPEN_STATUSES = (PENDING, APPROVED)
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=PENDING, verbose_name=_("Statut"))

    admin_note = models.TextField(blank=True, null=True, verbose_name=_("Note administrateur"))
    wallet_address = models.CharField(max_length=120, blank=True, null=True, verbose_name=_("Adresse USDT"))
    wallet_network = models.CharField(max_length=10, blank=True, null=True, verbose_name=_("Réseau"))
    paid_at = models.DateTimeField(blank=True, null=True, verbose_name=_("Payée le"))
    paid_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, blank=True, null=True, related_name='processed_withdrawals',
        verbose_name=_("Payée par (admin)"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    class Meta:
        ordering = ('-created_at',)
        verbose_name = _("Demande de retrait")
        verbose_name_plural = _("Demandes de retrait")
        indexes = [
            models.Index(fields=['user', 'status'], name='withdrawal_user_status_idx'),
        ]

    def __str__(self):
        return f"Retrait {self.id} - {self.user.username} - {self.amount}"
