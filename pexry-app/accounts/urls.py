from django.urls import path
from . import views

app_name = 'accounts'
urlpatterns = [
    path('profile/', views.my_profile, name='profile'),

    # Agents support
    path('user-agents/', views.agent_list, name='agent-list'),
    path('user-agents/create/', views.agent_create, name='agent-create'),
    path('user-agents/available/', views.available_agents, name='agent-available'),
    path('user-agents/me/', views.current_agent, name='agent-current'),
    path('user-agents/me/availability/', views.update_availability, name='agent-availability'),
    path('user-agents/<int:agent_id>/update/', views.agent_update, name='agent-update'),
    path('user-agents/<int:agent_id>/delete/', views.agent_delete, name='agent-delete'),
]
