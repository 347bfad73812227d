from django.contrib import admin
from .models import Product, Review


class ReviewInline(admin.TabularInline):
    model = Review
    extra = 0
    readonly_fields = ('user', 'rating', 'description', 'created_at')


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'tenant', 'vendor', 'price', 'delivery_type', 'is_archived', 'created_at')
    list_filter = ('is_archived', 'delivery_type', 'refund_policy')
    list_editable = ('is_archived',)
    list_display_links = ('id', 'name')
    search_fields = ('name', 'tenant__slug', 'vendor__username')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [ReviewInline]
    fieldsets = (
        ('Produit', {
            'fields': ('name', 'description', 'price', 'image', 'refund_policy', 'is_archived')
        }),
        ('Boutique', {
            'fields': ('tenant', 'vendor')
        }),
        ('Livraison', {
            'fields': ('delivery_type', 'delivery_text', 'file')
        }),
        ('Dates', {
            'fields': ('created_at', 'updated_at')
        }),
    )
    list_per_page = 25


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'product', 'user', 'rating', 'created_at')
    list_filter = ('rating',)
    search_fields = ('product__name', 'user__username', 'description')
    list_per_page = 25
