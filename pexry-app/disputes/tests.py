from decimal import Decimal

import pytest

from conftest import get_profile, set_balance
from disputes.models import Dispute, DisputeMessage
from disputes.services import DisputeService, is_transition_allowed
from notifications.models import Notification
from notifications.services import NotificationService
from orders.models import Order

pytestmark = pytest.mark.django_db


@pytest.fixture
def paid_order(make_order):
    return make_order(amount=Decimal('50.00'), status=Order.PAID)


@pytest.fixture
def dispute(buyer, seller, paid_order):
    set_balance(seller, available='100.00')
    return DisputeService.create_dispute(
        buyer,
        order_id=paid_order.id,
        subject='Link does not work',
        description='The download link returns a 404 error page.',
        category='product-not-received',
    )


@pytest.fixture
def dispute_manager(make_agent):
    return make_agent('mediator', manage_disputes=True)


def open_dispute(client, order_id, **overrides):
    payload = {
        'order_id': order_id,
        'subject': 'Wrong file delivered',
        'description': 'I received a different file than the one described.',
        'category': 'product-not-as-described',
    }
    payload.update(overrides)
    return client.post('/api/disputes/create/', payload, content_type='application/json')


def update_status(client, dispute_id, status, resolution=None):
    payload = {'status': status}
    if resolution is not None:
        payload['resolution'] = resolution
    return client.post(f'/api/disputes/{dispute_id}/status/', payload, content_type='application/json')


def test_create_dispute_holds_seller_funds(login, buyer, seller, paid_order):
    set_balance(seller, available='100.00')

    response = open_dispute(login(buyer), paid_order.id)

    assert response.status_code == 201
    body = response.json()['dispute']
    assert body['status'] == Dispute.OPEN
    assert body['hold_amount'] == '45.00'
    assert body['messages'][0]['message'] == 'I received a different file than the one described.'

    dispute = Dispute.objects.get()
    assert dispute.seller == seller
    assert dispute.funds_held is True
    profile = get_profile(seller)
    assert profile.available_for_withdrawal == Decimal('55.00')
    assert profile.balance_on_hold == Decimal('45.00')

    seller_notification = Notification.objects.get(user=seller, type=Notification.DISPUTE_OPENED)
    assert seller_notification.priority == Notification.URGENT
    assert Notification.objects.filter(user=buyer, type=Notification.DISPUTE_OPENED).exists()


def test_insufficient_balance_leaves_funds_untouched(buyer, seller, paid_order):
    set_balance(seller, available='10.00')
    dispute = DisputeService.create_dispute(
        buyer, paid_order.id, 'Not delivered', 'Nothing was delivered to me.', 'product-not-received')
    assert dispute.funds_held is False
    profile = get_profile(seller)
    assert profile.available_for_withdrawal == Decimal('10.00')
    assert profile.balance_on_hold == Decimal('0.00')


def test_only_buyer_can_open_dispute(login, outsider, paid_order):
    response = open_dispute(login(outsider), paid_order.id)
    assert response.status_code == 403
    assert Dispute.objects.count() == 0


def test_missing_order_is_not_found(login, buyer):
    assert open_dispute(login(buyer), 99999).status_code == 404


@pytest.mark.parametrize('status', [Order.PENDING, Order.EXPIRED])
def test_unpaid_order_cannot_be_disputed(login, buyer, seller, make_order, status):
    set_balance(seller, available='100.00')
    order = make_order(amount=Decimal('50.00'), status=status)

    response = open_dispute(login(buyer), order.id)

    assert response.status_code == 400
    assert response.json()['error'] == 'Only paid orders can be disputed'
    assert Dispute.objects.count() == 0
    assert get_profile(seller).balance_on_hold == Decimal('0.00')
    assert get_profile(buyer).available_for_withdrawal == Decimal('0.00')


def test_notification_failure_keeps_dispute_and_hold(buyer, seller, paid_order, monkeypatch):
    def broken_notify(**kwargs):
        raise RuntimeError('notification backend down')

    monkeypatch.setattr(NotificationService, 'notify_dispute_opened', staticmethod(broken_notify))
    set_balance(seller, available='100.00')

    dispute = DisputeService.create_dispute(
        buyer, paid_order.id, 'Not delivered', 'Nothing was delivered to me.', 'product-not-received')

    assert Dispute.objects.filter(pk=dispute.pk).exists()
    assert dispute.funds_held is True
    profile = get_profile(seller)
    assert profile.available_for_withdrawal == Decimal('55.00')
    assert profile.balance_on_hold == Decimal('45.00')
    assert not Notification.objects.filter(type=Notification.DISPUTE_OPENED).exists()


def test_one_dispute_per_order(login, buyer, dispute, paid_order):
    response = open_dispute(login(buyer), paid_order.id)
    assert response.status_code == 409
    assert response.json()['error'] == 'A dispute already exists for this order'


def test_dispute_input_is_validated(login, buyer, paid_order):
    response = open_dispute(login(buyer), paid_order.id, subject='Bad', description='short')
    assert response.status_code == 400
    assert set(response.json()['errors']) == {'subject', 'description'}


def test_non_participant_cannot_add_message(login, outsider, dispute):
    response = login(outsider).post(
        f'/api/disputes/{dispute.id}/messages/', {'message': 'Hello'}, content_type='application/json')
    assert response.status_code == 403
    assert DisputeMessage.objects.filter(dispute=dispute).count() == 1


def test_reply_moves_open_dispute_in_progress(login, seller, dispute):
    response = login(seller).post(
        f'/api/disputes/{dispute.id}/messages/', {'message': 'Sending a new link.'}, content_type='application/json')
    assert response.status_code == 201
    dispute.refresh_from_db()
    assert dispute.status == Dispute.IN_PROGRESS
    assert dispute.messages.count() == 2


def test_closed_dispute_rejects_messages(login, buyer, dispute, superuser):
    DisputeService.update_status(superuser, dispute.id, Dispute.CLOSED, 'Refund the buyer')
    response = login(buyer).post(
        f'/api/disputes/{dispute.id}/messages/', {'message': 'Any news?'}, content_type='application/json')
    assert response.status_code == 400
    assert dispute.messages.count() == 1


def test_only_managers_update_status(login, buyer, dispute):
    assert update_status(login(buyer), dispute.id, Dispute.RESOLVED).status_code == 403
    dispute.refresh_from_db()
    assert dispute.status == Dispute.OPEN


def test_resolution_in_favor_of_seller_releases_hold(login, seller, buyer, dispute, dispute_manager):
    response = update_status(login(dispute_manager), dispute.id, Dispute.RESOLVED, 'Link was valid')

    assert response.status_code == 200
    dispute.refresh_from_db()
    assert dispute.funds_released is True
    assert dispute.resolved_by == dispute_manager
    assert dispute.resolved_at is not None
    profile = get_profile(seller)
    assert profile.available_for_withdrawal == Decimal('100.00')
    assert profile.balance_on_hold == Decimal('0.00')
    assert get_profile(buyer).available_for_withdrawal == Decimal('0.00')

    won = Notification.objects.get(user=seller, type=Notification.DISPUTE_RESOLVED)
    assert won.metadata['won'] is True


def test_closing_in_favor_of_buyer_refunds_buyer(seller, buyer, dispute, superuser):
    DisputeService.update_status(superuser, dispute.id, Dispute.CLOSED, 'Refund issued to the buyer')

    seller_profile = get_profile(seller)
    assert seller_profile.available_for_withdrawal == Decimal('55.00')
    assert seller_profile.balance_on_hold == Decimal('0.00')
    assert get_profile(buyer).available_for_withdrawal == Decimal('45.00')


def test_closing_with_seller_mention_favors_seller(seller, dispute, superuser):
    DisputeService.update_status(superuser, dispute.id, Dispute.CLOSED, 'Closed in favor of the seller')
    assert get_profile(seller).available_for_withdrawal == Decimal('100.00')


def test_buyer_refund_without_hold_debits_available(buyer, seller, paid_order, superuser):
    set_balance(seller, available='10.00')
    dispute = DisputeService.create_dispute(
        buyer, paid_order.id, 'Not delivered', 'Nothing was delivered to me.', 'product-not-received')
    set_balance(seller, available='60.00')

    DisputeService.update_status(superuser, dispute.id, Dispute.CLOSED, 'Refund')

    assert get_profile(seller).available_for_withdrawal == Decimal('15.00')
    assert get_profile(buyer).available_for_withdrawal == Decimal('45.00')


def test_funds_are_released_only_once(seller, dispute, superuser):
    DisputeService.update_status(superuser, dispute.id, Dispute.RESOLVED, 'Seller was right')
    DisputeService.update_status(superuser, dispute.id, Dispute.CLOSED, 'Refund the buyer')

    assert get_profile(seller).available_for_withdrawal == Decimal('100.00')
    assert Notification.objects.filter(user=seller, type=Notification.DISPUTE_RESOLVED).count() == 1


def test_forward_policy_rejects_going_back(login, dispute, superuser):
    client = login(superuser)
    assert update_status(client, dispute.id, Dispute.RESOLVED).status_code == 200
    assert update_status(client, dispute.id, Dispute.OPEN).status_code == 400


def test_free_policy_allows_any_transition(settings):
    settings.PEXRY_DISPUTE_TRANSITIONS = 'free'
    assert is_transition_allowed(Dispute.CLOSED, Dispute.OPEN) is True
    settings.PEXRY_DISPUTE_TRANSITIONS = 'forward'
    assert is_transition_allowed(Dispute.CLOSED, Dispute.OPEN) is False
    assert is_transition_allowed(Dispute.OPEN, Dispute.RESOLVED) is True


def test_my_disputes_lists_both_sides(login, buyer, seller, outsider, dispute):
    assert login(buyer).get('/api/disputes/').json()['total'] == 1
    assert login(seller).get('/api/disputes/').json()['total'] == 1
    assert login(outsider).get('/api/disputes/').json()['total'] == 0


def test_dispute_detail_is_participant_scoped(login, outsider, dispute):
    assert login(outsider).get(f'/api/disputes/{dispute.id}/').status_code == 403


def test_internal_messages_hidden_from_participants(login, buyer, dispute, superuser):
    DisputeMessage.objects.create(dispute=dispute, author=superuser, message='Check seller logs', is_internal=True)

    buyer_view = login(buyer).get(f'/api/disputes/{dispute.id}/').json()['dispute']
    admin_view = login(superuser).get(f'/api/disputes/{dispute.id}/').json()['dispute']

    assert len(buyer_view['messages']) == 1
    assert len(admin_view['messages']) == 2


def test_mark_funds_released(login, buyer, dispute, superuser):
    url = '/api/disputes/mark-funds-released/'
    assert login(buyer).post(url, {'dispute_id': dispute.id}, content_type='application/json').status_code == 403
    assert login(superuser).post(url, {}, content_type='application/json').status_code == 400

    response = login(superuser).post(url, {'dispute_id': dispute.id}, content_type='application/json')
    assert response.status_code == 200
    dispute.refresh_from_db()
    assert dispute.funds_released is True
