from decimal import Decimal

import pytest
from django.core import mail

from notifications.models import Notification
from notifications.services import NotificationService

pytestmark = pytest.mark.django_db


@pytest.fixture
def inbox(buyer, outsider):
    NotificationService.create_notification(buyer.id, 'First', 'Hello', type=Notification.GENERAL)
    NotificationService.create_notification(buyer.id, 'Second', 'Hello again', type=Notification.MESSAGE)
    read = NotificationService.create_notification(buyer.id, 'Old', 'Already seen')
    read.mark_as_read()
    NotificationService.create_notification(outsider.id, 'Private', 'Not for the buyer')
    return buyer


def test_list_is_scoped_to_current_user(login, inbox):
    data = login(inbox).get('/api/notifications/').json()
    assert data['total'] == 3
    assert 'Private' not in [n['title'] for n in data['results']]


def test_unread_only_and_type_filters(login, inbox):
    client = login(inbox)
    assert client.get('/api/notifications/', {'unread_only': 'true'}).json()['total'] == 2
    data = client.get('/api/notifications/', {'type': 'message'}).json()
    assert [n['title'] for n in data['results']] == ['Second']
    assert client.get('/api/notifications/', {'type': 'bogus'}).status_code == 400


def test_unread_count(login, inbox):
    assert login(inbox).get('/api/notifications/unread-count/').json()['count'] == 2


def test_requires_authentication(client):
    assert client.get('/api/notifications/').status_code == 401


def test_mark_as_read(login, inbox):
    notification = Notification.objects.get(user=inbox, title='First')
    response = login(inbox).post(f'/api/notifications/{notification.id}/read/')
    assert response.status_code == 200
    notification.refresh_from_db()
    assert notification.read is True
    assert notification.read_at is not None


def test_cannot_touch_other_users_notifications(login, inbox, outsider):
    foreign = Notification.objects.get(user=outsider)
    client = login(inbox)

    response = client.post(f'/api/notifications/{foreign.id}/read/')
    assert response.status_code == 404
    assert response.json()['error'] == 'Notification not found or access denied'
    assert client.post(f'/api/notifications/{foreign.id}/delete/').status_code == 404

    foreign.refresh_from_db()
    assert foreign.read is False


def test_mark_all_as_read(login, inbox, outsider):
    response = login(inbox).post('/api/notifications/read-all/')
    assert response.json()['updated'] == 2
    assert not Notification.objects.filter(user=inbox, read=False).exists()
    assert Notification.objects.filter(user=outsider, read=False).count() == 1


def test_delete_notification(login, inbox):
    notification = Notification.objects.get(user=inbox, title='First')
    assert login(inbox).post(f'/api/notifications/{notification.id}/delete/').status_code == 200
    assert not Notification.objects.filter(pk=notification.pk).exists()


def test_sale_notification_sends_email(seller):
    notification = NotificationService.notify_sale(seller.id, 7, 'Ebook', Decimal('20.00'), buyer_name='buyer')

    assert notification.priority == Notification.HIGH
    assert notification.metadata['order_id'] == 7
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ['seller@example.com']
    assert 'Your earnings: $18.00' in mail.outbox[0].body


def test_email_failure_does_not_break_notification(seller, monkeypatch):
    def broken_send_mail(*args, **kwargs):
        raise ConnectionError('SMTP down')

    monkeypatch.setattr('notifications.services.send_mail', broken_send_mail)
    notification = NotificationService.notify_new_message(seller.id, 3, 'Hello', sender_name='buyer')
    assert notification.pk is not None


def test_user_without_email_gets_no_mail(make_user):
    user = make_user('silent')
    user.email = ''
    user.save()
    assert NotificationService.send_email(user.id, 'Subject', 'Body') is False
    assert mail.outbox == []


def test_test_endpoint_is_restricted(login, buyer, superuser):
    assert login(buyer).post('/api/notifications/test/').status_code == 403

    response = login(superuser).post(
        '/api/notifications/test/', {'title': 'Ping'}, content_type='application/json')
    assert response.status_code == 201
    assert response.json()['notification']['metadata'] == {'test': True}
    assert Notification.objects.get(user=superuser).title == 'Ping'
