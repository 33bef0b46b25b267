from django.contrib import admin
from payables_core.models import Order, Product
from .inlines import LotInline
from .mixins import TenantAdminMixin


# Register `Product` model
@admin.register(Product)
class ProductAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "company",
        "sku",
        "name",
        "cost_price",
        "quantity_on_hand",
        "is_active",
    )
    list_filter = ("company", "is_active")
    search_fields = ("sku", "name")
    # stock level and cost move with bills
    readonly_fields = ("cost_price", "quantity_on_hand")


# Register `Order` model
@admin.register(Order)
class OrderAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "company",
        "order_no",
        "vendor",
        "order_date",
        "status",
        "total_amount",
        "is_stock_receipt",
        "bill",
    )
    list_filter = ("company", "status", "is_stock_receipt")
    search_fields = ("order_no", "vendor__name")
    readonly_fields = ("bill", "is_stock_receipt")
    inlines = [LotInline]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company", "vendor", "bill")
