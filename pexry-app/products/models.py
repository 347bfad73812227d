from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from tenants.models import Tenant


class ProductQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_archived=False)


class Product(models.Model):
    """Produit numérique vendu par une boutique"""
    name = models.CharField(max_length=200, verbose_name=_("Nom du produit"))
    description = models.TextField(blank=True, null=True, verbose_name=_("Description"))
    price = models.DecimalField(
        max_digits=12, decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_("Prix (USD)"))
    tenant = models.ForeignKey(
        Tenant, on_delete=models.CASCADE, related_name='products', verbose_name=_("Boutique"))
    vendor = models.ForeignKey(
        User, on_delete=models.SET_NULL, blank=True, null=True, related_name='products', verbose_name=_("Vendeur"))
    image = models.ImageField(upload_to='products/imgs/', blank=True, null=True, verbose_name=_("Image"))

    NO_REFUNDS = 'no-refunds'
    REFUND_POLICY_CHOICES = [
        ('30-day', '30 jours'),
        ('14-day', '14 jours'),
        ('7-day', '7 jours'),
        ('3-day', '3 jours'),
        ('1-day', '1 jour'),
        (NO_REFUNDS, 'Aucun remboursement'),
    ]
    refund_policy = models.CharField(
        max_length=20, choices=REFUND_POLICY_CHOICES, default='30-day', verbose_name=_("Politique de remboursement"))

    FILE = 'file'
    TEXT = 'text'
    DELIVERY_TYPE_CHOICES = [
        (FILE, 'Fichier'),
        (TEXT, 'Texte'),
    ]
    delivery_type = models.CharField(
        max_length=10, choices=DELIVERY_TYPE_CHOICES, default=TEXT, verbose_name=_("Type de livraison"))
    delivery_text = models.TextField(
        blank=True, null=True, verbose_name=_("Contenu livré"),
        help_text=_("Visible uniquement par les acheteurs"))
    file = models.FileField(upload_to='products/files/', blank=True, null=True, verbose_name=_("Fichier livré"))

    is_archived = models.BooleanField(default=False, verbose_name=_("Archivé"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ('-created_at',)
        verbose_name = _("Produit")
        verbose_name_plural = _("Produits")
        indexes = [
            models.Index(fields=['tenant', 'is_archived'], name='products_tenant_archived_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # Le vendeur par défaut est le propriétaire de la boutique
        if self.vendor_id is None and self.tenant_id:
            self.vendor_id = Tenant.objects.filter(pk=self.tenant_id).values_list('owner_id', flat=True).first()
        super().save(*args, **kwargs)


class Review(models.Model):
    """Avis laissé par un acheteur sur un produit"""
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name='reviews', verbose_name=_("Produit"))
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='reviews', verbose_name=_("Utilisateur"))
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)], verbose_name=_("Note"))
    description = models.TextField(verbose_name=_("Commentaire"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    class Meta:
        ordering = ('-created_at',)
        verbose_name = _("Avis")
        verbose_name_plural = _("Avis")
        constraints = [
            models.UniqueConstraint(fields=['product', 'user'], name='unique_review_per_user'),
        ]

    def __str__(self):
        return f"{self.product.name} - {self.rating}/5"
