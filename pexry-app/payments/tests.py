import json
from decimal import Decimal
from urllib.parse import urlencode

import pytest
import requests
from django.core import mail
from django.db import DatabaseError

from accounts.models import Profile
from conftest import get_profile, set_balance
from notifications.models import Notification
from notifications.services import NotificationService
from orders.models import Order
from orders.services import OrderService
from payments.models import PaymentWebhookLog, WithdrawalRequest
from payments.services.nowpayments import (
    NowPaymentsService, PaymentProviderError, PaymentProviderTimeout, nowpayments_service,
)

pytestmark = pytest.mark.django_db

WEBHOOK_URL = '/api/nowpayments/webhook/'


def post_webhook(client, payload, **headers):
    return client.post(WEBHOOK_URL, data=json.dumps(payload), content_type='application/json', **headers)


class FakeResponse:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f'{self.status_code} error', response=self)

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


# Webhook

def test_finished_webhook_marks_order_paid(client, make_order):
    order = make_order(transaction_id='order-123')

    response = post_webhook(client, {'payment_status': 'finished', 'order_id': 'order-123', 'payment_id': 'pay-456'})

    assert response.status_code == 200
    assert response.json() == {'received': True}
    order.refresh_from_db()
    assert order.status == Order.PAID
    assert order.nowpayments_payment_id == 'pay-456'
    log = PaymentWebhookLog.objects.get()
    assert log.order == order
    assert log.processed is True


def test_numeric_payment_id_is_stored_as_string(client, make_order):
    order = make_order(transaction_id='order-789')
    post_webhook(client, {'payment_status': 'finished', 'order_id': 'order-789', 'payment_id': 5077125051})
    order.refresh_from_db()
    assert order.nowpayments_payment_id == '5077125051'


def test_replayed_webhook_is_idempotent(client, make_order, seller):
    order = make_order(transaction_id='order-321', amount=Decimal('20.00'))
    payload = {'payment_status': 'finished', 'order_id': 'order-321', 'payment_id': 'pay-1'}

    post_webhook(client, payload)
    post_webhook(client, payload)

    order.refresh_from_db()
    assert order.status == Order.PAID
    assert get_profile(seller).available_for_withdrawal == Decimal('18.00')
    assert Notification.objects.filter(user=seller, type=Notification.SALE).count() == 1
    assert PaymentWebhookLog.objects.count() == 2


def test_late_finished_webhook_pays_expired_order(client, make_order):
    order = make_order(transaction_id='order-late', status=Order.EXPIRED)
    post_webhook(client, {'payment_status': 'finished', 'order_id': 'order-late', 'payment_id': 'p'})
    order.refresh_from_db()
    assert order.status == Order.PAID


def test_order_lookup_is_trimmed_and_case_insensitive(client, make_order):
    order = make_order(transaction_id='order-abc')
    post_webhook(client, {'payment_status': 'finished', 'order_id': ' ORDER-ABC ', 'payment_id': 'p'})
    order.refresh_from_db()
    assert order.status == Order.PAID


@pytest.mark.parametrize('status', ['waiting', 'confirming', 'partially_paid', 'failed', 'expired'])
def test_non_finished_status_is_acknowledged_without_change(client, make_order, status):
    order = make_order(transaction_id='order-555')

    response = post_webhook(client, {'payment_status': status, 'order_id': 'order-555', 'payment_id': 'p'})

    assert response.status_code == 200
    assert response.json() == {'received': True}
    order.refresh_from_db()
    assert order.status == Order.PENDING
    assert order.nowpayments_payment_id is None


def test_unknown_order_is_acknowledged(client):
    response = post_webhook(client, {'payment_status': 'finished', 'order_id': 'order-missing', 'payment_id': 'p'})
    assert response.status_code == 200
    assert PaymentWebhookLog.objects.get().error_message == 'Commande introuvable'


def test_form_encoded_webhook_is_accepted(client, make_order):
    order = make_order(transaction_id='order-form')
    body = urlencode({'payment_status': 'finished', 'order_id': 'order-form', 'payment_id': '42'})

    response = client.post(WEBHOOK_URL, data=body, content_type='application/x-www-form-urlencoded')

    assert response.status_code == 200
    order.refresh_from_db()
    assert order.status == Order.PAID


def test_invalid_json_is_rejected(client):
    response = client.post(WEBHOOK_URL, data='{not json', content_type='application/json')
    assert response.status_code == 400
    assert response.json() == {'error': 'Invalid JSON'}
    assert PaymentWebhookLog.objects.count() == 0


def test_unsupported_content_type_is_rejected(client):
    response = client.post(WEBHOOK_URL, data='payment_status=finished', content_type='text/plain')
    assert response.status_code == 415
    assert response.json() == {'error': 'Unsupported Content-Type'}


def test_webhook_only_accepts_post(client):
    assert client.get(WEBHOOK_URL).status_code == 405


def test_internal_error_is_logged_and_acknowledged(client, make_order, monkeypatch):
    make_order(transaction_id='order-boom')

    def explode(order, payment_id=None):
        raise RuntimeError('database unavailable')

    monkeypatch.setattr(OrderService, 'mark_paid', staticmethod(explode))

    response = post_webhook(client, {'payment_status': 'finished', 'order_id': 'order-boom', 'payment_id': 'p'})

    assert response.status_code == 200
    assert response.json() == {'received': True}
    assert PaymentWebhookLog.objects.get().error_message == 'database unavailable'


def test_non_finite_number_is_invalid_json(client, make_order):
    order = make_order(transaction_id='order-nan')
    body = '{"payment_status": "finished", "order_id": "order-nan", "payment_id": "p", "actually_paid": NaN}'

    response = client.post(WEBHOOK_URL, data=body, content_type='application/json')

    assert response.status_code == 400
    assert response.json() == {'error': 'Invalid JSON'}
    assert PaymentWebhookLog.objects.count() == 0
    order.refresh_from_db()
    assert order.status == Order.PENDING


def test_oversized_values_are_truncated_in_log(client):
    response = post_webhook(client, {
        'payment_status': 's' * 80,
        'order_id': 'order-' + 'x' * 200,
        'payment_id': 'p' * 150,
    })

    assert response.status_code == 200
    log = PaymentWebhookLog.objects.get()
    assert len(log.payment_status) == 50
    assert len(log.order_reference) == 100
    assert log.order_reference.startswith('order-xxx')
    assert len(log.payment_id) == 100


def test_long_payment_id_still_pays_order(client, make_order):
    order = make_order(transaction_id='order-long')

    post_webhook(client, {'payment_status': 'finished', 'order_id': 'order-long', 'payment_id': '9' * 150})

    order.refresh_from_db()
    assert order.status == Order.PAID
    assert order.nowpayments_payment_id == '9' * 100


def test_audit_log_failure_still_processes_order(client, make_order, seller, monkeypatch):
    order = make_order(transaction_id='order-nolog')

    def broken_save(self, *args, **kwargs):
        raise DatabaseError('disk full')

    monkeypatch.setattr(PaymentWebhookLog, 'save', broken_save)

    response = post_webhook(client, {'payment_status': 'finished', 'order_id': 'order-nolog', 'payment_id': 'p'})

    assert response.status_code == 200
    assert response.json() == {'received': True}
    order.refresh_from_db()
    assert order.status == Order.PAID
    assert get_profile(seller).available_for_withdrawal == Decimal('18.00')
    assert PaymentWebhookLog.objects.count() == 0


def test_sale_notification_failure_keeps_payment(client, make_order, seller, monkeypatch):
    order = make_order(transaction_id='order-quiet')

    def broken_notify(**kwargs):
        raise RuntimeError('notification backend down')

    monkeypatch.setattr(NotificationService, 'notify_sale', staticmethod(broken_notify))

    response = post_webhook(client, {'payment_status': 'finished', 'order_id': 'order-quiet', 'payment_id': 'p'})

    assert response.status_code == 200
    assert response.json() == {'received': True}
    order.refresh_from_db()
    assert order.status == Order.PAID
    assert get_profile(seller).available_for_withdrawal == Decimal('18.00')
    log = PaymentWebhookLog.objects.get()
    assert log.processed is True
    assert log.error_message is None


def test_signature_is_required_when_secret_configured(client, settings, make_order):
    settings.NOWPAYMENTS_IPN_SECRET = 'ipn-secret'
    order = make_order(transaction_id='order-sig')
    payload = {'payment_status': 'finished', 'order_id': 'order-sig', 'payment_id': 'p'}

    response = post_webhook(client, payload, HTTP_X_NOWPAYMENTS_SIG='bad')
    assert response.status_code == 401
    order.refresh_from_db()
    assert order.status == Order.PENDING

    signature = NowPaymentsService._sign(payload, 'ipn-secret')
    response = post_webhook(client, payload, HTTP_X_NOWPAYMENTS_SIG=signature)
    assert response.status_code == 200
    order.refresh_from_db()
    assert order.status == Order.PAID
    assert PaymentWebhookLog.objects.filter(is_valid=True).count() == 1


# Client NOWPayments

def test_create_invoice_posts_to_invoice_endpoint(monkeypatch):
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(url=url, headers=headers, json=json, timeout=timeout)
        return FakeResponse({'id': '99', 'invoice_url': 'https://nowpayments.io/payment/?iid=99'})

    monkeypatch.setattr(requests, 'post', fake_post)

    invoice = nowpayments_service.create_invoice(amount=Decimal('12.50'), order_id='order-1')

    assert invoice['invoice_url'] == 'https://nowpayments.io/payment/?iid=99'
    assert captured['url'] == 'https://api.nowpayments.io/v1/invoice'
    assert captured['headers']['x-api-key'] == 'test-api-key'
    assert captured['json'] == {'price_amount': 12.5, 'price_currency': 'usd', 'order_id': 'order-1'}
    assert captured['timeout'] == 30


def test_create_invoice_timeout(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.exceptions.Timeout('read timed out')

    monkeypatch.setattr(requests, 'post', fake_post)

    with pytest.raises(PaymentProviderTimeout):
        nowpayments_service.create_invoice(amount=Decimal('1.00'), order_id='order-2')


def test_create_invoice_http_error(monkeypatch):
    monkeypatch.setattr(requests, 'post', lambda *a, **k: FakeResponse({'message': 'bad key'}, status_code=403))
    with pytest.raises(PaymentProviderError) as excinfo:
        nowpayments_service.create_invoice(amount=Decimal('1.00'), order_id='order-3')
    assert excinfo.value.status_code == 500


def test_bypass_mode_returns_simulated_invoice(settings, monkeypatch):
    settings.NOWPAYMENTS_BYPASS_API = True

    def fail(*args, **kwargs):
        raise AssertionError('network must not be used in bypass mode')

    monkeypatch.setattr(requests, 'post', fail)

    invoice = nowpayments_service.create_invoice(amount=Decimal('3.00'), order_id='order-4')
    assert invoice['order_id'] == 'order-4'
    assert invoice['invoice_url']


def test_verify_ipn_signature_rejects_without_secret():
    assert nowpayments_service.verify_ipn_signature({'a': 1}, 'anything') is False


# Retraits

@pytest.fixture
def seller_with_wallet(seller):
    set_balance(seller, available='100.00')
    Profile.objects.filter(user=seller).update(usdt_wallet_address='TXyz123', usdt_network='TRC20')
    return seller


@pytest.fixture
def payout_agent(make_agent):
    return make_agent('payouts', handle_payouts=True)


def create_withdrawal(client, amount):
    return client.post('/api/withdrawals/create/', {'amount': amount}, content_type='application/json')


def test_withdrawal_request(login, seller_with_wallet):
    response = create_withdrawal(login(seller_with_wallet), '40.00')

    assert response.status_code == 201
    withdrawal = WithdrawalRequest.objects.get()
    assert withdrawal.status == WithdrawalRequest.PENDING
    assert withdrawal.amount == Decimal('40.00')
    assert withdrawal.wallet_address == 'TXyz123'


def test_withdrawal_cannot_exceed_balance(login, seller_with_wallet):
    response = create_withdrawal(login(seller_with_wallet), '150.00')
    assert response.status_code == 400
    assert WithdrawalRequest.objects.count() == 0


def test_withdrawal_below_minimum(login, seller_with_wallet):
    assert create_withdrawal(login(seller_with_wallet), '5.00').status_code == 400


def test_withdrawal_requires_wallet(login, seller):
    set_balance(seller, available='50.00')
    assert create_withdrawal(login(seller), '20.00').status_code == 400


def test_only_one_open_withdrawal(login, seller_with_wallet):
    client = login(seller_with_wallet)
    create_withdrawal(client, '20.00')

    response = create_withdrawal(client, '20.00')

    assert response.status_code == 409
    assert 'pending withdrawal request' in response.json()['error']


def test_paid_withdrawal_debits_balance_and_notifies(login, seller_with_wallet, payout_agent):
    create_withdrawal(login(seller_with_wallet), '40.00')
    withdrawal = WithdrawalRequest.objects.get()

    response = login(payout_agent).post(
        f'/api/withdrawals/{withdrawal.id}/status/', {'status': 'paid'}, content_type='application/json')

    assert response.status_code == 200
    withdrawal.refresh_from_db()
    assert withdrawal.status == WithdrawalRequest.PAID
    assert withdrawal.paid_at is not None
    assert withdrawal.paid_by == payout_agent
    assert get_profile(seller_with_wallet).available_for_withdrawal == Decimal('60.00')
    notification = Notification.objects.get(user=seller_with_wallet, type=Notification.WITHDRAWAL_PAID)
    assert notification.metadata['withdrawal_id'] == withdrawal.id
    assert any('Withdrawal Completed' in m.subject for m in mail.outbox)


def test_rejected_withdrawal_notifies_with_reason(login, seller_with_wallet, superuser):
    create_withdrawal(login(seller_with_wallet), '40.00')
    withdrawal = WithdrawalRequest.objects.get()

    login(superuser).post(
        f'/api/withdrawals/{withdrawal.id}/status/',
        {'status': 'rejected', 'admin_note': 'Wallet address is invalid'},
        content_type='application/json',
    )

    notification = Notification.objects.get(user=seller_with_wallet, type=Notification.WITHDRAWAL_REJECTED)
    assert 'Wallet address is invalid' in notification.message
    assert get_profile(seller_with_wallet).available_for_withdrawal == Decimal('100.00')


def test_paid_withdrawal_floors_balance_at_zero(seller_with_wallet):
    withdrawal = WithdrawalRequest.objects.create(user=seller_with_wallet, amount=Decimal('40.00'))
    set_balance(seller_with_wallet, available='10.00')
    withdrawal.status = WithdrawalRequest.PAID
    withdrawal.save()
    assert get_profile(seller_with_wallet).available_for_withdrawal == Decimal('0.00')


def test_regular_user_cannot_process_withdrawals(login, seller_with_wallet, outsider):
    create_withdrawal(login(seller_with_wallet), '40.00')
    withdrawal = WithdrawalRequest.objects.get()

    response = login(outsider).post(
        f'/api/withdrawals/{withdrawal.id}/status/', {'status': 'paid'}, content_type='application/json')

    assert response.status_code == 403
    withdrawal.refresh_from_db()
    assert withdrawal.status == WithdrawalRequest.PENDING


def test_withdrawal_balance_and_history(login, seller_with_wallet):
    client = login(seller_with_wallet)
    create_withdrawal(client, '25.00')

    balance = client.get('/api/withdrawals/balance/').json()
    assert balance['available_for_withdrawal'] == '100.00'
    assert balance['pending_withdrawal']['amount'] == '25.00'

    history = client.get('/api/withdrawals/').json()
    assert history['total'] == 1
