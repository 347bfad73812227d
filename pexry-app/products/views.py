"""
Vues JSON du catalogue : liste filtrée, fiche produit avec statistiques d'avis, avis acheteurs
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db.models import Avg, Count
from django.http import Http404, JsonResponse
from django.views.decorators.http import require_http_methods

from project.api import (
    api_login_required, api_view, form_errors, get_int_param, get_request_data, paginate,
    MAX_PAGE_SIZE,
)
from project.exceptions import Conflict
from .forms import ReviewForm
from .models import Product, Review

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    'suggested': '-created_at',
    'trending': 'created_at',
    'hot_and_new': 'name',
}


def _round_percent(count, total):
    return int((Decimal(count) * 100 / Decimal(total)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def rating_summary(product):
    """Note moyenne (2 décimales), nombre d'avis et répartition en pourcentage par étoile"""
    reviews = Review.objects.filter(product=product)
    stats = reviews.aggregate(average=Avg('rating'), count=Count('id'))
    total = stats['count']
    distribution = {star: 0 for star in (5, 4, 3, 2, 1)}
    if not total:
        return {'review_rating': 0, 'review_count': 0, 'rating_distribution': distribution}

    for row in reviews.values('rating').annotate(n=Count('id')):
        if 1 <= row['rating'] <= 5:
            distribution[row['rating']] = _round_percent(row['n'], total)
    average = Decimal(str(stats['average'])).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return {
        'review_rating': float(average),
        'review_count': total,
        'rating_distribution': distribution,
    }


def serialize_product(product, extra=None):
    """Le contenu livré (delivery_text / file) n'est jamais exposé ici"""
    data = {
        'id': product.id,
        'name': product.name,
        'description': product.description,
        'price': str(product.price),
        'image': product.image.url if product.image else None,
        'refund_policy': product.refund_policy,
        'delivery_type': product.delivery_type,
        'vendor_id': product.vendor_id,
        'tenant': {
            'id': product.tenant_id,
            'name': product.tenant.name,
            'slug': product.tenant.slug,
            'image': product.tenant.image.url if product.tenant.image else None,
        },
        'created_at': product.created_at.isoformat(),
    }
    if extra:
        data.update(extra)
    return data


def _decimal_param(params, name):
    raw = params.get(name)
    if raw in (None, ''):
        return None
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        raise ValidationError(f'{name} must be a number')


@require_http_methods(["GET"])
@api_view
def product_list(request):
    params = request.GET
    products = Product.objects.active().select_related('tenant')

    min_price = _decimal_param(params, 'min_price')
    max_price = _decimal_param(params, 'max_price')
    if min_price is not None:
        products = products.filter(price__gte=min_price)
    if max_price is not None:
        products = products.filter(price__lte=max_price)

    tenant_slug = params.get('tenant_slug')
    if tenant_slug:
        products = products.filter(tenant__slug=tenant_slug)

    vendor_id = params.get('vendor_id')
    if vendor_id:
        products = products.filter(vendor_id=vendor_id)

    sort = params.get('sort') or 'suggested'
    if sort not in SORT_ORDERS:
        raise ValidationError(f'sort must be one of {", ".join(SORT_ORDERS)}')
    products = products.annotate(
        review_count=Count('reviews'), review_average=Avg('reviews__rating'),
    ).order_by(SORT_ORDERS[sort], '-id')

    page = get_int_param(params, 'page', 1, minimum=1)
    limit = get_int_param(params, 'limit', 20, minimum=1, maximum=MAX_PAGE_SIZE)

    def serializer(product):
        rating = 0
        if product.review_count:
            rating = float(Decimal(str(product.review_average)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))
        return serialize_product(product, {'review_count': product.review_count, 'review_rating': rating})

    data = paginate(products, page, limit, serializer=serializer)
    return JsonResponse({'success': True, **data})


@require_http_methods(["GET"])
@api_view
def product_detail(request, product_id):
    product = Product.objects.select_related('tenant').filter(id=product_id).first()
    if product is None or product.is_archived:
        raise Http404('Product not found')
    return JsonResponse({'success': True, 'product': serialize_product(product, rating_summary(product))})


@require_http_methods(["GET"])
@api_view
def product_stats(request):
    """Nombre de ventes (commandes payées ou livrées) par produit"""
    from orders.models import Order

    ids = [i for i in request.GET.get('ids', '').split(',') if i.strip()]
    try:
        ids = [int(i) for i in ids]
    except ValueError:
        raise ValidationError('ids must be a comma separated list of integers')

    stats = {str(i): {'sales': 0} for i in ids}
    rows = Order.objects.filter(
        product_id__in=ids, status__in=[Order.PAID, Order.DELIVERED],
    ).values('product_id').annotate(sales=Count('id'))
    for row in rows:
        stats[str(row['product_id'])] = {'sales': row['sales']}
    return JsonResponse({'success': True, 'stats': stats})


@require_http_methods(["POST"])
@api_login_required
@api_view
def review_create(request, product_id):
    """Un avis par acheteur, réservé à ceux qui ont payé le produit"""
    from orders.models import Order

    product = Product.objects.filter(id=product_id, is_archived=False).first()
    if product is None:
        raise Http404('Product not found')
    has_purchased = Order.objects.filter(
        user=request.user, product=product, status__in=[Order.PAID, Order.DELIVERED],
    ).exists()
    if not has_purchased:
        raise PermissionError('Only buyers of this product can review it')
    if Review.objects.filter(product=product, user=request.user).exists():
        raise Conflict('You already reviewed this product')

    form = ReviewForm(get_request_data(request))
    if not form.is_valid():
        raise form_errors(form)
    review = form.save(commit=False)
    review.product = product
    review.user = request.user
    review.save()
    logger.info(f"Avis {review.id} ajouté sur le produit {product.id} par {request.user.username}")
    return JsonResponse({
        'success': True,
        'review': {'id': review.id, 'rating': review.rating, 'description': review.description},
    }, status=201)
