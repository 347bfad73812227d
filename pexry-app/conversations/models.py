"""
Modèles de messagerie : conversations entre utilisateurs et demandes de support
"""
from django.contrib.auth.models import User
from django.db import models
from django.utils.translation import gettext_lazy as _

from orders.models import Order
from products.models import Product


class Conversation(models.Model):
    subject = models.CharField(max_length=200, verbose_name=_("Sujet"))

    CONVERSATION = 'conversation'
    SUPPORT = 'support'
    TYPE_CHOICES = [
        (CONVERSATION, 'Conversation'),
        (SUPPORT, 'Demande de support'),
    ]
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=CONVERSATION, verbose_name=_("Type"))

    participants = models.ManyToManyField(User, related_name='conversations', verbose_name=_("Participants"))
    assigned_agent = models.ForeignKey(
        User, on_delete=models.SET_NULL, blank=True, null=True, related_name='assigned_conversations',
        verbose_name=_("Agent assigné"))

    CATEGORY_CHOICES = [
        ('payment', 'Paiement'),
        ('dispute', 'Litige'),
        ('account', 'Compte'),
        ('technical', 'Technique'),
        ('refund', 'Remboursement'),
        ('other', 'Autre'),
    ]
    category = models.CharField(
        max_length=20, choices=CATEGORY_CHOICES, blank=True, null=True, verbose_name=_("Catégorie"))

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

    ACTIVE = 'active'
    WAITING = 'waiting'
    RESOLVED = 'resolved'
    CLOSED = 'closed'
    STATUS_CHOICES = [
        (ACTIVE, 'Active'),
        (WAITING, 'En attente de réponse'),
        (RESOLVED, 'Résolue'),
        (CLOSED, 'Fermée'),
    ]
    # Masquées des listes par défaut
    FINISHED_STATUSES = (RESOLVED, CLOSED)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=ACTIVE, verbose_name=_("Statut"))

    product = models.ForeignKey(
        Product, on_delete=models.SET_NULL, blank=True, null=True, related_name='conversations',
        verbose_name=_("Produit concerné"))
    order = models.ForeignKey(
        Order, on_delete=models.SET_NULL, blank=True, null=True, related_name='conversations',
        verbose_name=_("Commande concernée"))

    last_message_at = models.DateTimeField(blank=True, null=True, verbose_name=_("Dernier message le"))
    last_message_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, blank=True, null=True, related_name='+',
        verbose_name=_("Dernier message de"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    class Meta:
        ordering = ('-last_message_at', '-id')
        verbose_name = _("Conversation")
        verbose_name_plural = _("Conversations")
        indexes = [
            models.Index(fields=['type', 'status'], name='conv_type_status_idx'),
        ]

    def __str__(self):
        return f"{self.subject} ({self.get_type_display()})"

    @property
    def is_support(self):
        return self.type == self.SUPPORT


class ConversationMessage(models.Model):
    conversation = models.ForeignKey(
        Conversation, on_delete=models.CASCADE, related_name='messages', verbose_name=_("Conversation"))
    sender = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='conversation_messages', verbose_name=_("Expéditeur"))
    message = models.TextField(verbose_name=_("Message"))
    is_read = models.BooleanField(default=False, verbose_name=_("Lu"))
    is_internal = models.BooleanField(
        default=False, verbose_name=_("Note interne"),
        help_text=_("Visible uniquement par les agents"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date"))

    class Meta:
        ordering = ('created_at', 'id')
        verbose_name = _("Message")
        verbose_name_plural = _("Messages")
        indexes = [
            models.Index(fields=['conversation', 'is_read'], name='conv_msg_read_idx'),
        ]

    def __str__(self):
        return f"Message {self.id} - {self.sender.username}"
