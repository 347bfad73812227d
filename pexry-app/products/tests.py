from decimal import Decimal

import pytest

from orders.models import Order
from products.models import Review

pytestmark = pytest.mark.django_db


@pytest.fixture
def catalogue(make_product, make_user):
    other_tenant = make_user('rival').tenants.get()
    return {
        'cheap': make_product('Cheap guide', '5.00'),
        'pricey': make_product('Pricey course', '80.00'),
        'archived': make_product('Old ebook', '10.00', is_archived=True),
        'rival': make_product('Rival template', '15.00', tenant=other_tenant),
    }


def names(response):
    return {p['name'] for p in response.json()['results']}


def test_list_excludes_archived_products(client, catalogue):
    response = client.get('/api/products/')
    assert response.status_code == 200
    assert names(response) == {'Cheap guide', 'Pricey course', 'Rival template'}


def test_list_filters(client, catalogue, seller):
    assert names(client.get('/api/products/', {'min_price': '10', 'max_price': '50'})) == {'Rival template'}
    assert names(client.get('/api/products/', {'tenant_slug': 'rival'})) == {'Rival template'}
    assert names(client.get('/api/products/', {'vendor_id': seller.id})) == {'Cheap guide', 'Pricey course'}


def test_list_rejects_bad_parameters(client, catalogue):
    assert client.get('/api/products/', {'min_price': 'cheap'}).status_code == 400
    assert client.get('/api/products/', {'sort': 'random'}).status_code == 400


def test_list_pagination(client, catalogue):
    data = client.get('/api/products/', {'limit': 2, 'page': 2}).json()
    assert data['total'] == 3
    assert data['total_pages'] == 2
    assert data['has_previous'] is True
    assert len(data['results']) == 1


def test_vendor_defaults_to_store_owner(product, seller):
    assert product.vendor == seller


def test_detail_hides_delivery_content(client, product):
    data = client.get(f'/api/products/{product.id}/').json()['product']
    assert data['name'] == 'Ebook'
    assert data['tenant']['slug'] == 'seller'
    assert 'delivery_text' not in data
    assert data['review_count'] == 0


def test_detail_of_archived_product_is_not_found(client, catalogue):
    response = client.get(f"/api/products/{catalogue['archived'].id}/")
    assert response.status_code == 404
    assert response.json()['error'] == 'Product not found'


def test_rating_distribution(client, product, make_user):
    for username, rating in (('r1', 5), ('r2', 5), ('r3', 4)):
        Review.objects.create(product=product, user=make_user(username), rating=rating, description='ok')

    data = client.get(f'/api/products/{product.id}/').json()['product']
    assert data['review_count'] == 3
    assert data['review_rating'] == 4.67
    assert data['rating_distribution'] == {'5': 67, '4': 33, '3': 0, '2': 0, '1': 0}


def test_review_requires_purchase(login, buyer, product):
    response = login(buyer).post(f'/api/products/{product.id}/reviews/', {'rating': 5, 'description': 'Great'},
                                 content_type='application/json')
    assert response.status_code == 403
    assert not Review.objects.exists()


def test_buyer_reviews_once(login, buyer, product, make_order):
    make_order(status=Order.PAID)
    client = login(buyer)
    url = f'/api/products/{product.id}/reviews/'

    response = client.post(url, {'rating': 4, 'description': 'Useful'}, content_type='application/json')
    assert response.status_code == 201
    assert client.post(url, {'rating': 1, 'description': 'Changed my mind'},
                       content_type='application/json').status_code == 409
    assert Review.objects.get().rating == 4


def test_review_rating_is_validated(login, buyer, product, make_order):
    make_order(status=Order.PAID)
    response = login(buyer).post(f'/api/products/{product.id}/reviews/', {'rating': 9, 'description': 'Wow'},
                                 content_type='application/json')
    assert response.status_code == 400


def test_sales_stats(client, product, make_order):
    make_order(product=product, status=Order.PAID)
    make_order(product=product, status=Order.DELIVERED)
    make_order(product=product)

    data = client.get('/api/products/stats/', {'ids': f'{product.id},999'}).json()
    assert data['stats'] == {str(product.id): {'sales': 2}, '999': {'sales': 0}}
    assert client.get('/api/products/stats/', {'ids': 'a,b'}).status_code == 400


def test_free_product_price_is_allowed(make_product):
    assert make_product('Freebie', '0.00').price == Decimal('0.00')
