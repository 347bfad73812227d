from django.contrib import admin

from .models import PaymentWebhookLog, WithdrawalRequest


@admin.register(WithdrawalRequest)
class WithdrawalRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'amount', 'status', 'wallet_network', 'created_at', 'paid_at')
    list_filter = ('status', 'wallet_network', 'created_at')
    list_display_links = ('id', 'amount')
    search_fields = ('user__username', 'user__email', 'wallet_address')
    readonly_fields = ('wallet_address', 'wallet_network', 'paid_at', 'paid_by', 'created_at', 'updated_at')
    fieldsets = (
        ('Demande', {
            'fields': ('user', 'amount', 'status', 'admin_note')
        }),
        ('Portefeuille', {
            'fields': ('wallet_address', 'wallet_network')
        }),
        ('Paiement', {
            'fields': ('paid_at', 'paid_by')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at')
        }),
    )
    list_per_page = 25
    date_hierarchy = 'created_at'

    def save_model(self, request, obj, form, change):
        if obj.status == WithdrawalRequest.PAID and not obj.paid_by_id:
            obj.paid_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(PaymentWebhookLog)
class PaymentWebhookLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'order_reference', 'payment_status', 'order', 'is_valid', 'processed', 'created_at')
    list_filter = ('payment_status', 'is_valid', 'processed', 'created_at')
    search_fields = ('order_reference', 'payment_id', 'error_message')
    readonly_fields = (
        'order', 'payload', 'content_type', 'payment_status', 'order_reference', 'payment_id',
        'signature', 'created_at',
    )
    fieldsets = (
        ('Webhook', {
            'fields': ('payload', 'content_type', 'signature')
        }),
        ('Paiement', {
            'fields': ('order_reference', 'payment_id', 'payment_status', 'order')
        }),
        ('Statut', {
            'fields': ('is_valid', 'processed', 'error_message')
        }),
        ('Date', {
            'fields': ('created_at',)
        }),
    )
    list_per_page = 25
    date_hierarchy = 'created_at'
