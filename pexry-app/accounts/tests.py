from decimal import Decimal

import pytest

from accounts.models import Profile, UserAgent
from accounts.services import BalanceService, UserAgentService
from conftest import get_profile, set_balance

pytestmark = pytest.mark.django_db


def test_new_user_gets_profile_and_store(make_user):
    user = make_user('newcomer')
    profile = get_profile(user)
    assert profile.roles == ['user']
    assert profile.available_for_withdrawal == Decimal('0.00')
    assert user.tenants.get().slug == 'newcomer'


def test_profile_endpoint(login, seller):
    data = login(seller).get('/api/profile/').json()['profile']
    assert data['username'] == 'seller'
    assert data['available_for_withdrawal'] == '0.00'


def test_profile_requires_login(client):
    assert client.get('/api/profile/').status_code == 401


def test_update_wallet(login, seller):
    response = login(seller).post('/api/profile/', {
        'usdt_wallet_address': 'TXyz123', 'usdt_network': 'TRC20',
    }, content_type='application/json')
    assert response.status_code == 200
    assert get_profile(seller).usdt_network == Profile.TRC20


def test_wallet_requires_network(login, seller):
    response = login(seller).post('/api/profile/', {'usdt_wallet_address': 'TXyz123'},
                                  content_type='application/json')
    assert response.status_code == 400
    assert 'usdt_network' in response.json()['errors']


def test_roles_reflect_agent_and_superuser(make_agent, superuser):
    agent = make_agent('helper')
    assert get_profile(agent).roles == ['user-agent', 'user']
    assert get_profile(superuser).roles == ['super-admin', 'user']


def test_superuser_creates_agent(login, superuser):
    response = login(superuser).post('/api/user-agents/create/', {
        'name': 'Alice Support',
        'email': 'Alice@Example.com',
        'password': 'long-enough-pass',
        'handle_live_chat': True,
    }, content_type='application/json')

    assert response.status_code == 201
    agent = UserAgent.objects.get()
    assert agent.email == 'alice@example.com'
    assert agent.handle_live_chat is True
    assert agent.user.check_password('long-enough-pass')
    assert get_profile(agent.user).is_agent is True


def test_duplicate_agent_email_conflicts(login, superuser, make_agent):
    make_agent('helper')
    response = login(superuser).post('/api/user-agents/create/', {
        'name': 'Clone', 'email': 'HELPER@example.com',
    }, content_type='application/json')
    assert response.status_code == 409
    assert response.json()['error'] == 'Email already exists'


def test_agent_management_is_super_admin_only(login, make_agent):
    agent = make_agent('helper')
    client = login(agent)
    assert client.get('/api/user-agents/').status_code == 403
    assert client.post('/api/user-agents/create/', {'name': 'X', 'email': 'x@example.com'},
                       content_type='application/json').status_code == 403


def test_partial_agent_update(login, superuser, make_agent):
    record = UserAgent.objects.get(user=make_agent('helper'))
    response = login(superuser).post(f'/api/user-agents/{record.id}/update/', {'manage_disputes': True},
                                     content_type='application/json')
    assert response.status_code == 200
    record.refresh_from_db()
    assert record.manage_disputes is True
    assert record.name == 'Helper'


def test_delete_agent_revokes_role(login, superuser, make_agent):
    user = make_agent('helper')
    record = UserAgent.objects.get(user=user)
    assert login(superuser).post(f'/api/user-agents/{record.id}/delete/').status_code == 200
    assert not UserAgent.objects.exists()
    assert get_profile(user).is_agent is False


def test_non_agent_cannot_update_availability(login, buyer):
    response = login(buyer).post('/api/user-agents/me/availability/', {'availability': 'busy'},
                                 content_type='application/json')
    assert response.status_code == 403


def test_agent_updates_availability(login, make_agent):
    user = make_agent('helper')
    response = login(user).post('/api/user-agents/me/availability/', {'availability': 'busy'},
                                content_type='application/json')
    assert response.status_code == 200
    assert UserAgent.objects.get(user=user).availability == UserAgent.BUSY


def test_available_agents_least_loaded_first(make_agent):
    busy = make_agent('busy', handle_live_chat=True)
    idle = make_agent('idle', handle_live_chat=True)
    make_agent('nochat')
    UserAgent.objects.filter(user=busy).update(assigned_chats=3)

    users = [agent.user for agent in UserAgentService.get_available_agents()]
    assert users == [idle, busy]


def test_hold_refuses_insufficient_balance(seller):
    set_balance(seller, available='5.00')
    assert BalanceService.hold(seller.id, Decimal('10.00')) is False
    assert get_profile(seller).available_for_withdrawal == Decimal('5.00')


def test_hold_and_release(seller):
    set_balance(seller, available='30.00')
    assert BalanceService.hold(seller.id, Decimal('10.00')) is True
    profile = get_profile(seller)
    assert (profile.available_for_withdrawal, profile.balance_on_hold) == (Decimal('20.00'), Decimal('10.00'))

    BalanceService.release_hold(seller.id, Decimal('10.00'))
    profile = get_profile(seller)
    assert (profile.available_for_withdrawal, profile.balance_on_hold) == (Decimal('30.00'), Decimal('0.00'))


def test_debit_never_goes_negative(seller):
    set_balance(seller, available='4.00')
    BalanceService.debit_available(seller.id, Decimal('10.00'))
    assert get_profile(seller).available_for_withdrawal == Decimal('0.00')
