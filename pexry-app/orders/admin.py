from django.contrib import admin

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'product', 'amount', 'status', 'delivery_status',
                    'transaction_id', 'created_at')
    list_filter = ('status', 'delivery_status', 'created_at')
    list_editable = ('status',)
    list_display_links = ('id', 'amount', )
    search_fields = ('user__username', 'transaction_id', 'nowpayments_payment_id', 'product__name')
    readonly_fields = ('transaction_id', 'nowpayments_invoice_id', 'nowpayments_payment_id',
                       'paid_at', 'created_at', 'updated_at')
    fieldsets = (
        ('Commande', {
            'fields': ('user', 'product', 'amount', 'status', 'delivery_status')
        }),
        ('Paiement', {
            'fields': ('transaction_id', 'wallet_address', 'nowpayments_invoice_id',
                       'nowpayments_payment_id', 'paid_at')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at')
        }),
    )
    date_hierarchy = 'created_at'
    list_per_page = 25
