from django.urls import path

from . import views

app_name = 'conversations'

urlpatterns = [
    path('', views.conversation_list, name='conversation-list'),
    path('create/', views.conversation_create, name='conversation-create'),
    path('unread-count/', views.unread_count, name='unread-count'),
    path('agent/', views.agent_conversations, name='agent-conversations'),
    path('support/', views.support_conversations, name='support-conversations'),
    path('<int:conversation_id>/', views.conversation_detail, name='conversation-detail'),
    path('<int:conversation_id>/messages/', views.send_message, name='send-message'),
    path('<int:conversation_id>/read/', views.mark_as_read, name='mark-as-read'),
    path('<int:conversation_id>/assign/', views.assign_self, name='assign-self'),
    path('<int:conversation_id>/status/', views.update_status, name='update-status'),
]
