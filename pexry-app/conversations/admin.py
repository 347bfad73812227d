from django.contrib import admin

from .models import Conversation, ConversationMessage


class ConversationMessageInline(admin.TabularInline):
    model = ConversationMessage
    readonly_fields = ('created_at',)
    extra = 0


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    inlines = [ConversationMessageInline]
    list_display = ('id', 'subject', 'type', 'status', 'priority', 'assigned_agent', 'last_message_at')
    list_filter = ('type', 'status', 'priority', 'category')
    search_fields = ('subject', 'participants__username')
    filter_horizontal = ('participants',)
    readonly_fields = ('last_message_at', 'last_message_by', 'created_at', 'updated_at')
    fieldsets = (
        ('Conversation', {
            'fields': ('subject', 'type', 'status', 'participants')
        }),
        ('Support', {
            'fields': ('assigned_agent', 'category', 'priority')
        }),
        ('Relations', {
            'fields': ('product', 'order')
        }),
        ('Activité', {
            'fields': ('last_message_at', 'last_message_by', 'created_at', 'updated_at')
        }),
    )
    list_per_page = 25
