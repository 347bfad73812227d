from django.contrib import admin
from .models import Profile, UserAgent


class ProfileAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'is_agent', 'usdt_network', 'available_for_withdrawal', 'balance_on_hold')
    list_filter = ('is_agent', 'usdt_network')
    list_display_links = ('id', 'user', )
    list_per_page = 25
    search_fields = ('id', 'user__username', 'user__email', 'usdt_wallet_address')
    readonly_fields = ('date', 'date_update')

admin.site.register(Profile, ProfileAdmin)


@admin.register(UserAgent)
class UserAgentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'email', 'status', 'availability', 'assigned_chats', 'total_chats_handled', 'last_login_at')
    list_filter = ('status', 'availability', 'handle_live_chat', 'manage_disputes')
    search_fields = ('name', 'email', 'user__username')
    readonly_fields = ('last_login_at', 'created_at', 'updated_at')
    fieldsets = (
        ('Agent', {
            'fields': ('user', 'name', 'email', 'status', 'availability')
        }),
        ('Permissions', {
            'fields': ('handle_payouts', 'handle_support_tickets', 'handle_live_chat', 'view_user_data', 'manage_disputes')
        }),
        ('Activité', {
            'fields': ('assigned_chats', 'total_chats_handled', 'last_login_at')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at')
        }),
    )
    list_per_page = 25
