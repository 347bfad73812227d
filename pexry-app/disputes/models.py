"""
Modèles des litiges acheteur / vendeur
"""
from decimal import Decimal

from django.contrib.auth.models import User
from django.db import models
from django.utils.translation import gettext_lazy as _

from orders.models import Order


class Dispute(models.Model):
    """
    Litige ouvert par l'acheteur sur une commande (un seul par commande)
    Une partie des gains du vendeur est bloquée jusqu'à la résolution
    """
    order = models.OneToOneField(
        Order, on_delete=models.CASCADE, related_name='dispute', verbose_name=_("Commande"))
    buyer = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='disputes_as_buyer', verbose_name=_("Acheteur"))
    seller = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='disputes_as_seller', verbose_name=_("Vendeur"))
    subject = models.CharField(max_length=200, verbose_name=_("Sujet"))
    description = models.TextField(verbose_name=_("Description"))

    OPEN = 'open'
    IN_PROGRESS = 'in-progress'
    RESOLVED = 'resolved'
    CLOSED = 'closed'
    STATUS_CHOICES = [
        (OPEN, 'Ouvert'),
        (IN_PROGRESS, 'En cours'),
        (RESOLVED, 'Résolu'),
        (CLOSED, 'Fermé'),
    ]
    # Ordre des statuts pour la politique de transition "forward"
    STATUS_SEQUENCE = (OPEN, IN_PROGRESS, RESOLVED, CLOSED)
    RESOLUTION_STATUSES = (RESOLVED, CLOSED)
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=OPEN, db_index=True, verbose_name=_("Statut"))

    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    URGENT = 'urgent'
    PRIORITY_CHOICES = [
        (LOW, 'Basse'),
        (MEDIUM, 'Moyenne'),
        (HIGH, 'Haute'),
        (URGENT, 'Urgente'),
    ]
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default=MEDIUM, verbose_name=_("Priorité"))

    CATEGORY_CHOICES = [
        ('product-not-received', 'Produit non reçu'),
        ('product-not-as-described', 'Produit non conforme'),
        ('refund-request', 'Demande de remboursement'),
        ('delivery-issue', 'Problème de livraison'),
        ('payment-issue', 'Problème de paiement'),
        ('other', 'Autre'),
    ]
    category = models.CharField(max_length=40, choices=CATEGORY_CHOICES, verbose_name=_("Catégorie"))

    resolution = models.TextField(blank=True, null=True, verbose_name=_("Résolution"))
    resolved_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, blank=True, null=True, related_name='resolved_disputes',
        verbose_name=_("Résolu par"))
    resolved_at = models.DateTimeField(blank=True, null=True, verbose_name=_("Résolu le"))

    order_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'), verbose_name=_("Montant de la commande"))
    hold_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'), verbose_name=_("Montant bloqué"),
        help_text=_("Part vendeur du montant de la commande"))
    funds_held = models.BooleanField(
        default=False, verbose_name=_("Fonds bloqués"),
        help_text=_("Le solde du vendeur couvrait le montant au moment de l'ouverture"))
    funds_released = models.BooleanField(default=False, verbose_name=_("Fonds libérés"))

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    class Meta:
        ordering = ('-created_at',)
        verbose_name = _("Litige")
        verbose_name_plural = _("Litiges")
        indexes = [
            models.Index(fields=['buyer', 'status'], name='dispute_buyer_status_idx'),
            models.Index(fields=['seller', 'status'], name='dispute_seller_status_idx'),
        ]

    def __str__(self):
        return f"Litige #{self.id} - {self.subject}"

    def is_participant(self, user):
        return user.id in (self.buyer_id, self.seller_id)

    @property
    def is_closed(self):
        return self.status == self.CLOSED


class DisputeMessage(models.Model):
    dispute = models.ForeignKey(
        Dispute, on_delete=models.CASCADE, related_name='messages', verbose_name=_("Litige"))
    author = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='dispute_messages', verbose_name=_("Auteur"))
    message = models.TextField(verbose_name=_("Message"))
    is_internal = models.BooleanField(
        default=False, verbose_name=_("Note interne"),
        help_text=_("Visible uniquement par les administrateurs"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date"))

    class Meta:
        ordering = ('created_at', 'id')
        verbose_name = _("Message de litige")
        verbose_name_plural = _("Messages de litige")

    def __str__(self):
        return f"Message {self.id} - litige #{self.dispute_id}"


class DisputeEvidence(models.Model):
    """Pièce jointe fournie par une des parties"""
    dispute = models.ForeignKey(
        Dispute, on_delete=models.CASCADE, related_name='evidence', verbose_name=_("Litige"))
    uploaded_by = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='dispute_evidence', verbose_name=_("Envoyé par"))
    file = models.FileField(upload_to='disputes/evidence/%Y/%m/', verbose_name=_("Fichier"))
    description = models.CharField(max_length=255, blank=True, verbose_name=_("Description"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date"))

    class Meta:
        ordering = ('created_at', 'id')
        verbose_name = _("Preuve")
        verbose_name_plural = _("Preuves")

    def __str__(self):
        return f"Preuve {self.id} - litige #{self.dispute_id}"
