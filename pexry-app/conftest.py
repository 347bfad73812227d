from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.test import Client

from accounts.models import Profile, UserAgent
from orders.models import Order
from products.models import Product


@pytest.fixture(autouse=True)
def pexry_settings(settings, tmp_path):
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    settings.NOWPAYMENTS_API_KEY = 'test-api-key'
    settings.NOWPAYMENTS_IPN_SECRET = ''
    settings.NOWPAYMENTS_BYPASS_API = False
    settings.PEXRY_PUBLIC_URL = 'http://testserver'
    settings.PEXRY_SELLER_SHARE = Decimal('0.90')
    settings.PEXRY_MIN_WITHDRAWAL = Decimal('10.00')
    settings.PEXRY_DISPUTE_TRANSITIONS = 'forward'
    return settings


@pytest.fixture
def make_user(db):
    def _make(username, **extra):
        return User.objects.create_user(
            username=username, email=f'{username}@example.com', password='s3cret-pass', **extra)
    return _make


@pytest.fixture
def seller(make_user):
    return make_user('seller')


@pytest.fixture
def buyer(make_user):
    return make_user('buyer')


@pytest.fixture
def outsider(make_user):
    return make_user('outsider')


@pytest.fixture
def superuser(make_user):
    return make_user('root', is_superuser=True, is_staff=True)


@pytest.fixture
def make_agent(make_user):
    def _make(username, **permissions):
        user = make_user(username)
        Profile.objects.filter(user=user).update(is_agent=True)
        defaults = {
            'name': username.title(),
            'email': f'{username}@example.com',
            'status': UserAgent.ACTIVE,
            'availability': UserAgent.AVAILABLE,
        }
        defaults.update(permissions)
        UserAgent.objects.create(user=user, **defaults)
        return user
    return _make


@pytest.fixture
def tenant(seller):
    return seller.tenants.get()


@pytest.fixture
def make_product(tenant):
    def _make(name='Ebook', price='20.00', **extra):
        extra.setdefault('tenant', tenant)
        extra.setdefault('delivery_text', 'https://download.example.com/secret')
        return Product.objects.create(name=name, price=Decimal(price), **extra)
    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def make_order(buyer, product):
    def _make(**extra):
        extra.setdefault('user', buyer)
        extra.setdefault('product', product)
        extra.setdefault('amount', extra['product'].price)
        return Order.objects.create(**extra)
    return _make


@pytest.fixture
def login(db):
    """Client authentifié pour un utilisateur donné"""
    def _login(user):
        client = Client()
        client.force_login(user)
        return client
    return _login


def set_balance(user, available='0.00', on_hold='0.00'):
    Profile.objects.filter(user=user).update(
        available_for_withdrawal=Decimal(available), balance_on_hold=Decimal(on_hold))


def get_profile(user):
    return Profile.objects.get(user=user)
