from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'type', 'priority', 'title', 'read', 'created_at')
    list_filter = ('type', 'priority', 'read', 'created_at')
    search_fields = ('user__username', 'title', 'message')
    readonly_fields = ('read_at', 'created_at', 'updated_at')
    date_hierarchy = 'created_at'
    list_per_page = 25
