from django.urls import path
from . import views

app_name = 'notifications'
urlpatterns = [
    path('', views.notification_list, name='notification-list'),
    path('unread-count/', views.unread_count, name='unread-count'),
    path('read-all/', views.mark_all_as_read, name='read-all'),
    path('test/', views.create_test_notification, name='create-test'),
    path('<int:notification_id>/read/', views.mark_as_read, name='mark-read'),
    path('<int:notification_id>/delete/', views.delete_notification, name='delete'),
]
