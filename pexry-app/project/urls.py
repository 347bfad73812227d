"""
Routes de Pexry : administration Django et API JSON
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('orders.urls', namespace='orders')),
    path('api/', include('payments.urls', namespace='payments')),
    path('api/', include('accounts.urls', namespace='accounts')),
    path('api/products/', include('products.urls', namespace='products')),
    path('api/tenants/', include('tenants.urls', namespace='tenants')),
    path('api/notifications/', include('notifications.urls', namespace='notifications')),
    path('api/disputes/', include('disputes.urls', namespace='disputes')),
    path('api/conversations/', include('conversations.urls', namespace='conversations')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
