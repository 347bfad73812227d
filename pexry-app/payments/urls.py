from django.urls import path

from . import views

app_name = 'payments'

urlpatterns = [
    path('nowpayments/webhook/', views.nowpayments_webhook, name='nowpayments-webhook'),
    path('withdrawals/', views.withdrawal_list, name='withdrawal-list'),
    path('withdrawals/balance/', views.withdrawal_balance, name='withdrawal-balance'),
    path('withdrawals/create/', views.withdrawal_create, name='withdrawal-create'),
    path('withdrawals/admin/', views.withdrawal_admin_list, name='withdrawal-admin-list'),
    path('withdrawals/<int:withdrawal_id>/status/', views.withdrawal_update_status, name='withdrawal-update-status'),
]
