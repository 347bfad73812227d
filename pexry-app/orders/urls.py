from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    # Checkout
    path('checkout/purchase/', views.checkout_purchase, name='checkout-purchase'),
    path('checkout/products/', views.checkout_products, name='checkout-products'),

    # Commandes acheteur
    path('orders/', views.my_orders, name='my-orders'),
    path('orders/stats/', views.order_stats, name='order-stats'),
    path('orders/seller/', views.seller_orders, name='seller-orders'),
    path('orders/<int:order_id>/', views.order_detail, name='order-detail'),
    path('orders/<int:order_id>/content/', views.order_content, name='order-content'),
    path('orders/<int:order_id>/deliver/', views.order_mark_delivered, name='order-deliver'),
]
