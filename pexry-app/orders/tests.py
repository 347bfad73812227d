from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.utils import timezone

from conftest import get_profile
from notifications.models import Notification
from orders.models import Order
from orders.services import FREE_ORDER_MESSAGE, OrderService
from payments.services.nowpayments import PaymentProviderTimeout, nowpayments_service

pytestmark = pytest.mark.django_db

PURCHASE_URL = '/api/checkout/purchase/'


@pytest.fixture
def invoice_calls(monkeypatch):
    calls = []

    def fake_create_invoice(**kwargs):
        calls.append({'kwargs': kwargs, 'pending_orders': Order.objects.filter(status=Order.PENDING).count()})
        return {'id': 'inv-1', 'invoice_url': 'https://nowpayments.io/payment/?iid=inv-1'}

    monkeypatch.setattr(nowpayments_service, 'create_invoice', fake_create_invoice)
    return calls


def purchase(client, product_ids, tenant_slug='seller'):
    return client.post(
        PURCHASE_URL, {'product_ids': product_ids, 'tenant_slug': tenant_slug}, content_type='application/json')


def test_purchase_requires_authentication(client, product):
    response = purchase(client, [product.id])
    assert response.status_code == 401


def test_purchase_requires_tenant_slug(login, buyer, product):
    response = login(buyer).post(PURCHASE_URL, {'product_ids': [product.id]}, content_type='application/json')
    assert response.status_code == 400


def test_archived_product_fails_without_creating_order(login, buyer, make_product, invoice_calls):
    available = make_product(name='Course')
    archived = make_product(name='Old course', is_archived=True)

    response = purchase(login(buyer), [available.id, archived.id])

    assert response.status_code == 404
    assert response.json()['error'] == 'Products not found'
    assert Order.objects.count() == 0
    assert invoice_calls == []


def test_product_from_another_tenant_is_not_found(login, buyer, make_user, product, invoice_calls):
    other_seller = make_user('other')
    response = purchase(login(buyer), [product.id], tenant_slug=other_seller.tenants.get().slug)
    assert response.status_code == 404
    assert Order.objects.count() == 0


def test_unknown_tenant_is_not_found(login, buyer, product, invoice_calls):
    response = purchase(login(buyer), [product.id], tenant_slug='no-such-shop')
    assert response.status_code == 404
    assert response.json()['error'] == 'Tenant not found'
    assert Order.objects.count() == 0


def test_free_checkout_marks_order_paid_without_invoice(login, buyer, make_product, invoice_calls):
    free = make_product(name='Free sample', price='0.00')

    response = purchase(login(buyer), [free.id])

    assert response.status_code == 200
    body = response.json()
    assert body['url'] is None
    assert body['message'] == FREE_ORDER_MESSAGE
    order = Order.objects.get()
    assert order.status == Order.PAID
    assert order.paid_at is not None
    assert invoice_calls == []


def test_paid_checkout_creates_pending_order_before_invoice(login, buyer, make_product, invoice_calls):
    first = make_product(name='Ebook', price='20.00')
    second = make_product(name='Template', price='5.50')

    response = purchase(login(buyer), [first.id, second.id])

    assert response.status_code == 200
    assert response.json()['url'] == 'https://nowpayments.io/payment/?iid=inv-1'
    order = Order.objects.get()
    assert order.status == Order.PENDING
    assert order.amount == Decimal('25.50')
    assert order.product == first
    assert order.transaction_id.startswith('order-')
    assert order.nowpayments_invoice_id == 'inv-1'

    assert len(invoice_calls) == 1
    assert invoice_calls[0]['pending_orders'] == 1
    kwargs = invoice_calls[0]['kwargs']
    assert kwargs['order_id'] == order.transaction_id
    assert kwargs['ipn_callback_url'] == 'http://testserver/api/nowpayments/webhook/'


def test_transaction_ids_are_unique(login, buyer, product, invoice_calls):
    client = login(buyer)
    purchase(client, [product.id])
    purchase(client, [product.id])
    ids = list(Order.objects.values_list('transaction_id', flat=True))
    assert len(set(ids)) == 2


def test_invoice_without_url_is_internal_error(login, buyer, product, monkeypatch):
    monkeypatch.setattr(nowpayments_service, 'create_invoice', lambda **kwargs: {'id': 'inv-2'})

    response = purchase(login(buyer), [product.id])

    assert response.status_code == 500
    assert response.json()['error'] == 'Failed to create NowPayments invoice'
    assert Order.objects.get().status == Order.PENDING


def test_invoice_timeout_is_reported_as_gateway_timeout(login, buyer, product, monkeypatch):
    def timeout(**kwargs):
        raise PaymentProviderTimeout()

    monkeypatch.setattr(nowpayments_service, 'create_invoice', timeout)

    response = purchase(login(buyer), [product.id])

    assert response.status_code == 504
    assert Order.objects.get().status == Order.PENDING


def test_cart_summary_returns_total(client, make_product):
    a = make_product(name='A', price='3.00')
    b = make_product(name='B', price='4.25')
    response = client.post('/api/checkout/products/', {'ids': [a.id, b.id]}, content_type='application/json')
    assert response.status_code == 200
    body = response.json()
    assert body['total_price'] == '7.25'
    assert [p['id'] for p in body['products']] == [a.id, b.id]
    assert 'delivery_text' not in body['products'][0]


def test_mark_paid_credits_vendor_once(make_order, seller):
    order = make_order(amount=Decimal('20.00'))

    assert OrderService.mark_paid(order, 'pay-1') is True
    assert OrderService.mark_paid(order, 'pay-1') is False

    order.refresh_from_db()
    assert order.status == Order.PAID
    assert order.nowpayments_payment_id == 'pay-1'
    assert get_profile(seller).available_for_withdrawal == Decimal('18.00')
    assert Notification.objects.filter(user=seller, type=Notification.SALE).count() == 1


def test_mark_paid_keeps_delivered_status(make_order):
    order = make_order(status=Order.DELIVERED)
    OrderService.mark_paid(order, 'pay-2')
    order.refresh_from_db()
    assert order.status == Order.DELIVERED
    assert order.nowpayments_payment_id == 'pay-2'


def test_admin_save_to_paid_credits_vendor(make_order, seller):
    order = make_order(amount=Decimal('10.00'))
    order.status = Order.PAID
    order.save()
    assert get_profile(seller).available_for_withdrawal == Decimal('9.00')


def test_expire_pending_orders_command(make_order):
    stale = make_order()
    fresh = make_order()
    Order.objects.filter(pk=stale.pk).update(created_at=timezone.now() - timedelta(hours=48))

    call_command('expire_pending_orders', '--dry-run')
    stale.refresh_from_db()
    assert stale.status == Order.PENDING

    call_command('expire_pending_orders')
    stale.refresh_from_db()
    fresh.refresh_from_db()
    assert stale.status == Order.EXPIRED
    assert fresh.status == Order.PENDING


def test_order_detail_is_owner_only(login, outsider, make_order):
    order = make_order()
    response = login(outsider).get(f'/api/orders/{order.id}/')
    assert response.status_code == 403


def test_order_content_requires_payment(login, buyer, make_order):
    order = make_order()
    client = login(buyer)

    assert client.get(f'/api/orders/{order.id}/content/').status_code == 403

    OrderService.mark_paid(order, 'pay-3')
    response = client.get(f'/api/orders/{order.id}/content/')
    assert response.status_code == 200
    assert response.json()['delivery_text'] == 'https://download.example.com/secret'


def test_order_stats(login, buyer, make_order):
    make_order(amount=Decimal('10.00'), status=Order.PAID)
    make_order(amount=Decimal('5.00'), status=Order.DELIVERED)
    make_order(amount=Decimal('7.00'))

    body = login(buyer).get('/api/orders/stats/').json()

    assert body['total'] == 3
    assert body['pending'] == 1
    assert body['paid'] == 1
    assert body['delivered'] == 1
    assert body['total_spent'] == '15.00'


def test_seller_orders_and_delivery(login, seller, buyer, make_order):
    order = make_order(status=Order.PAID)
    client = login(seller)

    body = client.get('/api/orders/seller/').json()
    assert body['total'] == 1
    assert body['results'][0]['buyer']['username'] == buyer.username

    response = client.post(f'/api/orders/{order.id}/deliver/')
    assert response.status_code == 200
    order.refresh_from_db()
    assert order.status == Order.DELIVERED
    assert order.delivery_status == Order.SENT


def test_only_seller_can_deliver(login, buyer, make_order):
    order = make_order(status=Order.PAID)
    assert login(buyer).post(f'/api/orders/{order.id}/deliver/').status_code == 403
