"""
Vues JSON des commandes : checkout, historique acheteur, ventes vendeur et livraison
"""
import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db.models import Count, Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from products.views import serialize_product
from project.api import (
    api_login_required, api_view, get_int_param, get_request_data, paginate, MAX_PAGE_SIZE,
)
from .models import Order
from .services import CheckoutService

logger = logging.getLogger(__name__)

FILTERABLE_STATUSES = [Order.PENDING, Order.PAID, Order.DELIVERED, Order.EXPIRED]


def serialize_order(order, include_buyer=False):
    data = {
        'id': order.id,
        'status': order.status,
        'amount': str(order.amount),
        'transaction_id': order.transaction_id,
        'delivery_status': order.delivery_status,
        'wallet_address': order.wallet_address,
        'nowpayments_payment_id': order.nowpayments_payment_id,
        'paid_at': order.paid_at.isoformat() if order.paid_at else None,
        'created_at': order.created_at.isoformat(),
        'product': serialize_product(order.product),
    }
    if include_buyer:
        data['buyer'] = {'id': order.user_id, 'username': order.user.username, 'email': order.user.email}
    return data


def _status_filter(params):
    status = params.get('status')
    if status and status not in FILTERABLE_STATUSES:
        raise ValidationError(f'status must be one of {", ".join(FILTERABLE_STATUSES)}')
    return status


@require_http_methods(["POST"])
@api_login_required
@api_view
def checkout_purchase(request):
    """
    Initialise le paiement d'un panier
    Retourne l'URL de la facture NOWPayments (ou null pour un panier gratuit)
    """
    data = get_request_data(request)
    tenant_slug = data.get('tenant_slug')
    if not tenant_slug:
        raise ValidationError('tenant_slug is required')
    result = CheckoutService.purchase(request.user, data.get('product_ids'), tenant_slug)
    return JsonResponse({'success': True, **result})


@require_http_methods(["POST"])
@api_view
def checkout_products(request):
    """Résumé du panier : produits disponibles et total"""
    data = get_request_data(request)
    products, total = CheckoutService.get_products(data.get('ids'))
    return JsonResponse({
        'success': True,
        'products': [serialize_product(p) for p in products],
        'total_price': str(total),
    })


@require_http_methods(["GET"])
@api_login_required
@api_view
def my_orders(request):
    orders = Order.objects.filter(user=request.user).select_related('product__tenant')
    status = _status_filter(request.GET)
    if status:
        orders = orders.filter(status=status)
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = paginate(orders.order_by('-created_at', '-id'), page, limit, serializer=serialize_order)
    return JsonResponse({'success': True, **data})


@require_http_methods(["GET"])
@api_login_required
@api_view
def order_detail(request, order_id):
    order = get_object_or_404(Order.objects.select_related('product__tenant'), id=order_id)
    if order.user_id != request.user.id:
        raise PermissionError('You can only view your own orders')
    return JsonResponse({'success': True, 'order': serialize_order(order)})


@require_http_methods(["GET"])
@api_login_required
def order_stats(request):
    orders = Order.objects.filter(user=request.user)
    counts = {row['status']: row['n'] for row in orders.values('status').annotate(n=Count('id'))}
    total_spent = orders.filter(status__in=[Order.PAID, Order.DELIVERED]).aggregate(s=Sum('amount'))['s']
    return JsonResponse({
        'success': True,
        'total': sum(counts.values()),
        'pending': counts.get(Order.PENDING, 0),
        'paid': counts.get(Order.PAID, 0),
        'delivered': counts.get(Order.DELIVERED, 0),
        'expired': counts.get(Order.EXPIRED, 0),
        'total_spent': str(total_spent or Decimal('0.00')),
    })


@require_http_methods(["GET"])
@api_login_required
@api_view
def seller_orders(request):
    """Commandes portant sur les produits vendus par l'utilisateur connecté"""
    orders = Order.objects.filter(product__vendor=request.user).select_related('product__tenant', 'user')
    status = _status_filter(request.GET)
    if status:
        orders = orders.filter(status=status)
    page = get_int_param(request.GET, 'page', 1, minimum=1)
    limit = get_int_param(request.GET, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)
    data = paginate(
        orders.order_by('-created_at', '-id'), page, limit,
        serializer=lambda o: serialize_order(o, include_buyer=True),
    )
    return JsonResponse({'success': True, **data})


@require_http_methods(["GET"])
@api_login_required
@api_view
def order_content(request, order_id):
    """Contenu livré (texte ou fichier), réservé à l'acheteur d'une commande payée"""
    order = get_object_or_404(Order.objects.select_related('product'), id=order_id)
    if order.user_id != request.user.id:
        raise PermissionError('You can only view your own orders')
    if not order.is_paid:
        raise PermissionError('This order has not been paid')
    product = order.product
    return JsonResponse({
        'success': True,
        'delivery_type': product.delivery_type,
        'delivery_text': product.delivery_text if product.delivery_type == product.TEXT else None,
        'file': product.file.url if product.delivery_type == product.FILE and product.file else None,
        'delivery_status': order.delivery_status,
    })


@require_http_methods(["POST"])
@api_login_required
@api_view
def order_mark_delivered(request, order_id):
    """Le vendeur confirme la livraison manuelle d'une commande payée"""
    order = get_object_or_404(Order.objects.select_related('product'), id=order_id)
    if order.product.vendor_id != request.user.id and not request.user.is_superuser:
        raise PermissionError('Only the seller can deliver this order')
    if order.status not in (Order.PAID, Order.DELIVERED):
        raise ValidationError('Only paid orders can be delivered')
    order.status = Order.DELIVERED
    order.delivery_status = Order.SENT
    order.save(update_fields=['status', 'delivery_status', 'updated_at'])
    logger.info(f"Commande #{order.id} livrée par {request.user.username}")
    return JsonResponse({'success': True, 'order': serialize_order(order)})
