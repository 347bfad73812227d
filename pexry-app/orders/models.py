import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from products.models import Product


def generate_transaction_id():
    """Identifiant de corrélation envoyé au prestataire de paiement (order_id NOWPayments)"""
    return f"order-{uuid.uuid4().hex}"


class Order(models.Model):
    """Une tentative d'achat : créée au checkout, payée via le webhook NOWPayments"""
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='orders', verbose_name=_("Acheteur"))
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name='orders', verbose_name=_("Produit"))

    PENDING = 'pending'
    PAID = 'paid'
    DELIVERED = 'delivered'
    EXPIRED = 'expired'
    STATUS_CHOICES = [
        (PENDING, 'En attente'),
        (PAID, 'Payée'),
        (DELIVERED, 'Livrée'),
        (EXPIRED, 'Expirée'),
    ]
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=PENDING, db_index=True, verbose_name=_("Statut"))
    amount = models.DecimalField(max_digits=12, decimal_places=2, verbose_name=_("Montant (USD)"))
    wallet_address = models.CharField(max_length=120, blank=True, null=True, verbose_name=_("Adresse de paiement"))
    transaction_id = models.CharField(
        max_length=100, unique=True, default=generate_transaction_id, verbose_name=_("ID de transaction"),
        help_text=_("Clé de corrélation utilisée par le webhook de paiement"))

    AUTO = 'auto'
    WAITING = 'waiting'
    SENT = 'sent'
    DELIVERY_STATUS_CHOICES = [
        (AUTO, 'Automatique'),
        (WAITING, 'En attente'),
        (SENT, 'Envoyée'),
    ]
    delivery_status = models.CharField(
        max_length=10, choices=DELIVERY_STATUS_CHOICES, default=AUTO, verbose_name=_("Statut de livraison"))

    nowpayments_invoice_id = models.CharField(
        max_length=100, blank=True, null=True, verbose_name=_("ID facture NOWPayments"))
    nowpayments_payment_id = models.CharField(
        max_length=100, blank=True, null=True, verbose_name=_("ID paiement NOWPayments"))

    paid_at = models.DateTimeField(blank=True, null=True, verbose_name=_("Date de paiement"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    class Meta:
        ordering = ('-created_at',)
        verbose_name = _("Commande")
        verbose_name_plural = _("Commandes")
        indexes = [
            models.Index(fields=['user', 'status'], name='orders_user_status_idx'),
            models.Index(fields=['status', 'created_at'], name='orders_status_created_idx'),
        ]

    def __str__(self):
        return f"Commande #{self.id} ({self.status})"

    @property
    def is_paid(self):
        return self.status in (self.PAID, self.DELIVERED)

    def is_stale(self, now=None):
        """Commande en attente plus ancienne que le délai de réconciliation"""
        if self.status != self.PENDING:
            return False
        ttl = getattr(settings, 'PEXRY_PENDING_ORDER_TTL_HOURS', 24)
        now = now or timezone.now()
        return self.created_at < now - timedelta(hours=ttl)
