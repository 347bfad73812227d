from django.urls import path
from . import views

app_name = 'products'
urlpatterns = [
    path('', views.product_list, name='product-list'),
    path('stats/', views.product_stats, name='product-stats'),
    path('<int:product_id>/', views.product_detail, name='product-detail'),
    path('<int:product_id>/reviews/', views.review_create, name='review-create'),
]
