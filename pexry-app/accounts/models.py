from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models.signals import post_save
from django.utils.translation import gettext_lazy as _


class Profile(models.Model):
    """
    Profil Pexry rattaché à chaque utilisateur
    Porte les rôles, l'adresse de retrait USDT et les soldes vendeur
    """
    user = models.OneToOneField(
        User, on_delete=models.CASCADE, related_name='profile', verbose_name=_("Utilisateur"))
    display_name = models.CharField(max_length=100, blank=True, null=True, verbose_name=_("Nom affiché"))
    image = models.ImageField(upload_to='profile_pic/', blank=True, null=True, verbose_name=_("Photo"))

    # Rôle agent support (le rôle super admin est porté par user.is_superuser)
    is_agent = models.BooleanField(default=False, verbose_name=_("Agent support"))

    TRC20 = 'TRC20'
    BEP20 = 'BEP20'
    ERC20 = 'ERC20'
    NETWORK_CHOICES = [
        (TRC20, 'TRC20 (Tron)'),
        (BEP20, 'BEP20 (BNB Smart Chain)'),
        (ERC20, 'ERC20 (Ethereum)'),
    ]
    usdt_wallet_address = models.CharField(
        max_length=120, blank=True, null=True, verbose_name=_("Adresse USDT"))
    usdt_network = models.CharField(
        max_length=10, choices=NETWORK_CHOICES, blank=True, null=True, verbose_name=_("Réseau USDT"))

    available_for_withdrawal = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_("Disponible au retrait"))
    balance_on_hold = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_("Solde bloqué"),
        help_text=_("Montant gelé par des litiges en cours"))

    date = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    date_update = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    class Meta:
        verbose_name = _("Profil")
        verbose_name_plural = _("Profils")

    def __str__(self):
        return self.user.username

    @property
    def roles(self):
        roles = ['user']
        if self.is_agent:
            roles.insert(0, 'user-agent')
        if self.user.is_superuser:
            roles.insert(0, 'super-admin')
        return roles


def create_profile(sender, **kwargs):
    if kwargs['created']:
        Profile.objects.get_or_create(user=kwargs['instance'])


post_save.connect(create_profile, sender=User)


class UserAgent(models.Model):
    """Agent du support : disponibilité, permissions et charge de travail"""
    user = models.OneToOneField(
        User, on_delete=models.CASCADE, related_name='agent', blank=True, null=True, verbose_name=_("Utilisateur"))
    name = models.CharField(max_length=150, verbose_name=_("Nom"))
    email = models.EmailField(unique=True, verbose_name=_("Email"))

    ACTIVE = 'active'
    INACTIVE = 'inactive'
    SUSPENDED = 'suspended'
    STATUS_CHOICES = [
        (ACTIVE, 'Actif'),
        (INACTIVE, 'Inactif'),
        (SUSPENDED, 'Suspendu'),
    ]
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=INACTIVE, verbose_name=_("Statut"))

    AVAILABLE = 'available'
    UNAVAILABLE = 'unavailable'
    BUSY = 'busy'
    AVAILABILITY_CHOICES = [
        (AVAILABLE, 'Disponible'),
        (UNAVAILABLE, 'Indisponible'),
        (BUSY, 'Occupé'),
    ]
    availability = models.CharField(
        max_length=20, choices=AVAILABILITY_CHOICES, default=UNAVAILABLE, verbose_name=_("Disponibilité"))

    # Permissions
    handle_payouts = models.BooleanField(default=False, verbose_name=_("Gère les retraits"))
    handle_support_tickets = models.BooleanField(default=False, verbose_name=_("Gère les tickets support"))
    handle_live_chat = models.BooleanField(default=False, verbose_name=_("Gère le chat en direct"))
    view_user_data = models.BooleanField(default=False, verbose_name=_("Voit les données utilisateurs"))
    manage_disputes = models.BooleanField(default=False, verbose_name=_("Gère les litiges"))

    last_login_at = models.DateTimeField(blank=True, null=True, verbose_name=_("Dernière connexion"))
    assigned_chats = models.PositiveIntegerField(default=0, verbose_name=_("Conversations assignées"))
    total_chats_handled = models.PositiveIntegerField(default=0, verbose_name=_("Conversations traitées"))

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    PERMISSION_FIELDS = (
        'handle_payouts', 'handle_support_tickets', 'handle_live_chat',
        'view_user_data', 'manage_disputes',
    )

    class Meta:
        ordering = ('-created_at',)
        verbose_name = _("Agent support")
        verbose_name_plural = _("Agents support")
        indexes = [
            models.Index(fields=['status', 'availability'], name='accounts_agent_status_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.email})"

    @property
    def permissions(self):
        return {field: getattr(self, field) for field in self.PERMISSION_FIELDS}

    def is_available_for_chat(self):
        """Actif, disponible et autorisé au chat en direct"""
        return self.status == self.ACTIVE and self.availability == self.AVAILABLE and self.handle_live_chat
