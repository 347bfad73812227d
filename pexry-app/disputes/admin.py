from django.contrib import admin, messages
from django.core.exceptions import ValidationError

from .models import Dispute, DisputeEvidence, DisputeMessage
from .services import DisputeService


class DisputeMessageInline(admin.TabularInline):
    model = DisputeMessage
    readonly_fields = ('created_at',)
    extra = 0


class DisputeEvidenceInline(admin.TabularInline):
    model = DisputeEvidence
    readonly_fields = ('created_at',)
    extra = 0


@admin.register(Dispute)
class DisputeAdmin(admin.ModelAdmin):
    inlines = [DisputeMessageInline, DisputeEvidenceInline]
    list_display = ('id', 'subject', 'order', 'buyer', 'seller', 'status', 'priority', 'category',
                    'hold_amount', 'funds_released', 'created_at')
    list_filter = ('status', 'priority', 'category', 'funds_released', 'created_at')
    list_display_links = ('id', 'subject')
    search_fields = ('subject', 'description', 'buyer__username', 'seller__username')
    readonly_fields = ('order_amount', 'hold_amount', 'funds_held', 'funds_released',
                       'resolved_by', 'resolved_at', 'created_at', 'updated_at')
    fieldsets = (
        ('Litige', {
            'fields': ('order', 'buyer', 'seller', 'subject', 'description', 'category', 'priority', 'status')
        }),
        ('Résolution', {
            'fields': ('resolution', 'resolved_by', 'resolved_at')
        }),
        ('Fonds', {
            'fields': ('order_amount', 'hold_amount', 'funds_held', 'funds_released')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at')
        }),
    )
    list_per_page = 25
    date_hierarchy = 'created_at'

    def save_model(self, request, obj, form, change):
        """Un changement de statut passe par le service pour libérer les fonds"""
        if not (change and 'status' in form.changed_data):
            super().save_model(request, obj, form, change)
            return
        new_status = obj.status
        obj.status = form.initial['status']
        super().save_model(request, obj, form, change)
        try:
            DisputeService.update_status(request.user, obj.pk, new_status, obj.resolution)
        except ValidationError as e:
            self.message_user(request, '; '.join(e.messages), level=messages.ERROR)
