"""
Services des commandes : checkout, confirmation de paiement et réconciliation
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import Http404
from django.urls import reverse
from django.utils import timezone

from payments.services.nowpayments import PaymentProviderError, nowpayments_service
from products.models import Product
from tenants.models import Tenant
from .models import Order, generate_transaction_id
from .signals import order_paid

logger = logging.getLogger(__name__)

FREE_ORDER_MESSAGE = 'Order marked as paid (free product).'


def _clean_ids(product_ids):
    if not isinstance(product_ids, (list, tuple)) or not product_ids:
        raise ValidationError('product_ids must be a non-empty list')
    try:
        return [int(i) for i in product_ids]
    except (TypeError, ValueError):
        raise ValidationError('product_ids must contain integers')


class CheckoutService:
    """Initiation du paiement d'un panier"""

    @staticmethod
    def load_products(product_ids, tenant_slug=None):
        """
        Charge les produits non archivés demandés (optionnellement limités à une boutique)
        Lève Http404 si un seul produit manque
        """
        ids = _clean_ids(product_ids)
        products = Product.objects.active().filter(id__in=ids).select_related('tenant')
        if tenant_slug is not None:
            products = products.filter(tenant__slug=tenant_slug)
        products = list(products)
        if len(products) != len(ids):
            raise Http404('Products not found')
        order = {pk: i for i, pk in enumerate(ids)}
        products.sort(key=lambda p: order[p.id])
        return products

    @staticmethod
    def get_products(product_ids):
        products = CheckoutService.load_products(product_ids)
        total = sum((p.price for p in products), Decimal('0.00'))
        return products, total

    @staticmethod
    def purchase(user, product_ids, tenant_slug):
        """
        Crée la commande et la facture NOWPayments

        La commande en attente est enregistrée avant l'appel au prestataire :
        si l'appel échoue elle reste en attente et sera expirée par la réconciliation.

        Returns:
            {'url': invoice_url} ou {'url': None, 'message': ...} pour un total nul
        """
        tenant = Tenant.objects.filter(slug=tenant_slug).first()
        if tenant is None:
            raise Http404('Tenant not found')

        products = CheckoutService.load_products(product_ids, tenant_slug=tenant.slug)

        total = sum((p.price for p in products), Decimal('0.00'))
        transaction_id = generate_transaction_id()

        if total == 0:
            order = Order.objects.create(
                user=user,
                product=products[0],
                amount=total,
                status=Order.PAID,
                paid_at=timezone.now(),
                transaction_id=transaction_id,
                delivery_status=Order.AUTO,
            )
            logger.info(f"Commande gratuite #{order.id} marquée payée pour {user.username}")
            return {'url': None, 'message': FREE_ORDER_MESSAGE, 'order_id': order.id}

        order = Order.objects.create(
            user=user,
            product=products[0],
            amount=total,
            status=Order.PENDING,
            transaction_id=transaction_id,
        )
        logger.info(f"Commande #{order.id} ({transaction_id}) créée en attente de paiement: {total} USD")

        public_url = getattr(settings, 'PEXRY_PUBLIC_URL', '').rstrip('/')
        invoice = nowpayments_service.create_invoice(
            amount=total,
            order_id=transaction_id,
            description=f"Pexry order #{order.id}",
            ipn_callback_url=f"{public_url}{reverse('payments:nowpayments-webhook')}" if public_url else None,
            success_url=f"{public_url}/library" if public_url else None,
            cancel_url=f"{public_url}/tenants/{tenant.slug}/checkout" if public_url else None,
        )

        invoice_url = invoice.get('invoice_url') if isinstance(invoice, dict) else None
        if not invoice_url:
            logger.error(f"Réponse NOWPayments sans invoice_url pour la commande #{order.id}: {invoice}")
            raise PaymentProviderError('Failed to create NowPayments invoice')

        if invoice.get('id'):
            Order.objects.filter(pk=order.pk).update(nowpayments_invoice_id=str(invoice['id']))
        return {'url': invoice_url}


class OrderService:
    """Transitions d'état des commandes"""

    @staticmethod
    def find_by_transaction_id(transaction_id):
        """Recherche exacte puis insensible à la casse et aux espaces"""
        if not transaction_id:
            return None
        transaction_id = str(transaction_id)
        order = Order.objects.filter(transaction_id=transaction_id).first()
        if order is None:
            order = Order.objects.filter(transaction_id__iexact=transaction_id.strip()).first()
        return order

    @staticmethod
    def mark_paid(order, payment_id=None):
        """
        Passe la commande en payée (idempotent)

        La transition est une mise à jour conditionnelle : seule la première
        livraison qui fait réellement passer la commande en payée émet order_paid.
        Une commande déjà livrée garde son statut.

        Returns:
            True si la commande vient de passer en payée
        """
        now = timezone.now()
        fields = {'updated_at': now}
        if payment_id is not None:
            fields['nowpayments_payment_id'] = str(payment_id)

        transitioned = Order.objects.filter(pk=order.pk).exclude(
            status__in=[Order.PAID, Order.DELIVERED]
        ).update(status=Order.PAID, paid_at=now, **fields)
        if not transitioned:
            Order.objects.filter(pk=order.pk).update(**fields)
        order.refresh_from_db()

        if transitioned:
            logger.info(f"Commande #{order.id} payée (paiement {payment_id})")
            order_paid.send(sender=Order, order=order)
        return bool(transitioned)

    @staticmethod
    def expire_pending_orders(older_than_hours=None, dry_run=False):
        """
        Passe en expirée les commandes restées en attente au-delà du délai

        Returns:
            Nombre de commandes concernées
        """
        if older_than_hours is None:
            older_than_hours = getattr(settings, 'PEXRY_PENDING_ORDER_TTL_HOURS', 24)
        cutoff = timezone.now() - timedelta(hours=older_than_hours)
        stale = Order.objects.filter(status=Order.PENDING, created_at__lt=cutoff)
        if dry_run:
            return stale.count()
        count = stale.update(status=Order.EXPIRED, updated_at=timezone.now())
        if count:
            logger.info(f"{count} commande(s) en attente expirée(s) (plus de {older_than_hours}h)")
        return count
