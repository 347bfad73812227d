from django.urls import path
from . import views

app_name = 'tenants'
urlpatterns = [
    path('<int:tenant_id>/update/', views.tenant_update, name='tenant-update'),
    path('<slug:slug>/', views.tenant_detail, name='tenant-detail'),
]
