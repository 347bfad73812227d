"""
Signaux des commandes : crédit vendeur et notification de vente lors du paiement
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db.models.signals import post_save, pre_save
from django.dispatch import Signal, receiver

from accounts.services import BalanceService
from notifications.services import NotificationService
from .models import Order

logger = logging.getLogger(__name__)

# Émis une seule fois par commande, au passage en payée (argument : order)
order_paid = Signal()


def seller_share(amount):
    share = getattr(settings, 'PEXRY_SELLER_SHARE', Decimal('0.90'))
    return (Decimal(amount) * Decimal(share)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


@receiver(pre_save, sender=Order)
def remember_previous_status(sender, instance, **kwargs):
    if instance.pk:
        instance._previous_status = Order.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
    else:
        instance._previous_status = None


@receiver(post_save, sender=Order)
def detect_paid_transition(sender, instance, created, **kwargs):
    """Passage en payée via save() (admin, scripts) : même traitement que le webhook"""
    if created or kwargs.get('raw'):
        return
    previous = getattr(instance, '_previous_status', None)
    if instance.status == Order.PAID and previous not in (Order.PAID, Order.DELIVERED):
        order_paid.send(sender=Order, order=instance)


@receiver(order_paid)
def credit_vendor_and_notify_sale(sender, order, **kwargs):
    product = order.product
    if not product.vendor_id:
        logger.warning(f"Commande #{order.id} payée sans vendeur associé au produit {product.id}")
        return

    amount = seller_share(order.amount)
    if amount > 0:
        BalanceService.credit_available(product.vendor_id, amount)
        logger.info(f"Vendeur {product.vendor_id} crédité de {amount} USD pour la commande #{order.id}")

    # Une notification perdue ne doit jamais annuler le paiement
    try:
        NotificationService.notify_sale(
            seller_id=product.vendor_id,
            order_id=order.id,
            product_name=product.name,
            amount=order.amount,
            buyer_name=order.user.username,
        )
        NotificationService.notify_payment_confirmed(
            buyer_id=order.user_id,
            order_id=order.id,
            product_name=product.name,
            amount=order.amount,
            transaction_id=order.transaction_id,
        )
    except Exception as e:
        logger.exception(f"Erreur lors de la notification de vente pour la commande #{order.id}: {str(e)}")
