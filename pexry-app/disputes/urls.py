from django.urls import path

from . import views

app_name = 'disputes'

urlpatterns = [
    path('', views.dispute_list, name='dispute-list'),
    path('all/', views.dispute_admin_list, name='dispute-admin-list'),
    path('create/', views.dispute_create, name='dispute-create'),
    path('mark-funds-released/', views.mark_funds_released, name='mark-funds-released'),
    path('<int:dispute_id>/', views.dispute_detail, name='dispute-detail'),
    path('<int:dispute_id>/messages/', views.dispute_add_message, name='dispute-add-message'),
    path('<int:dispute_id>/evidence/', views.dispute_add_evidence, name='dispute-add-evidence'),
    path('<int:dispute_id>/status/', views.dispute_update_status, name='dispute-update-status'),
]
