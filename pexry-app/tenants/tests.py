import pytest

from tenants.models import Tenant

pytestmark = pytest.mark.django_db


def test_detail_by_slug(client, tenant):
    response = client.get('/api/tenants/seller/')
    assert response.status_code == 200
    assert response.json()['tenant']['id'] == tenant.id


def test_missing_shop(client):
    response = client.get('/api/tenants/nowhere/')
    assert response.status_code == 404
    assert response.json()['error'] == 'Shop not found'


def test_slug_is_unique_per_username(make_user):
    make_user('Shop Owner')
    second = make_user('Shop-Owner')
    slugs = set(Tenant.objects.values_list('slug', flat=True))
    assert 'shop-owner' in slugs
    assert second.tenants.get().slug != 'shop-owner'


def test_owner_updates_shop(login, seller, tenant):
    response = login(seller).post(f'/api/tenants/{tenant.id}/update/', {'name': 'Seller Supplies'},
                                  content_type='application/json')
    assert response.status_code == 200
    tenant.refresh_from_db()
    assert tenant.name == 'Seller Supplies'
    assert tenant.slug == 'seller'


def test_other_user_cannot_update_shop(login, outsider, tenant):
    response = login(outsider).post(f'/api/tenants/{tenant.id}/update/', {'name': 'Hijacked'},
                                    content_type='application/json')
    assert response.status_code == 403
    tenant.refresh_from_db()
    assert tenant.name != 'Hijacked'


def test_superuser_can_update_any_shop(login, superuser, tenant):
    response = login(superuser).post(f'/api/tenants/{tenant.id}/update/', {'name': 'Moderated'},
                                     content_type='application/json')
    assert response.status_code == 200
    assert Tenant.objects.get(pk=tenant.pk).name == 'Moderated'
