from django.contrib.auth.models import User
from django.db import models
from django.utils.text import slugify
from django.utils.translation import gettext_lazy as _


class Tenant(models.Model):
    """Boutique d'un vendeur : regroupe ses produits sous un slug public"""
    name = models.CharField(max_length=150, verbose_name=_("Nom de la boutique"))
    slug = models.SlugField(max_length=160, unique=True, verbose_name=_("Slug"))
    image = models.ImageField(upload_to='tenants/', blank=True, null=True, verbose_name=_("Image"))
    owner = models.ForeignKey(
        User, on_delete=models.SET_NULL, blank=True, null=True, related_name='tenants', verbose_name=_("Propriétaire"))
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Date de création"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Date de mise à jour"))

    class Meta:
        ordering = ('name',)
        verbose_name = _("Boutique")
        verbose_name_plural = _("Boutiques")

    def __str__(self):
        return self.name

    @classmethod
    def unique_slug(cls, value):
        base = slugify(value) or 'store'
        slug, suffix = base, 1
        while cls.objects.filter(slug=slug).exists():
            suffix += 1
            slug = f"{base}-{suffix}"
        return slug

    def can_be_edited_by(self, user):
        return bool(user.is_superuser or (self.owner_id and self.owner_id == user.id))
