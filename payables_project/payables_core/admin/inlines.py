from django.contrib import admin

from payables_core.models import BillItem, BillPayment, OrderItem

# ---------- Inline admin classes ----------
# Bill items and payments are written by the bill services only,
# so these inlines are for reading.


class ReadOnlyInlineMixin:
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class BillItemInline(ReadOnlyInlineMixin, admin.TabularInline):
    """Shows bill items under a Bill page"""

    model = BillItem
    fields = (
        "product", "product_name", "quantity", "unit_price",
        "tax_rate", "tax_amount", "total_price")
    readonly_fields = fields

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("product")


class BillPaymentInline(ReadOnlyInlineMixin, admin.TabularInline):
    """Payment history of a bill"""

    model = BillPayment
    fk_name = "bill"
    fields = (
        "payment_date", "payment_amount", "payment_method",
        "deposit_to", "notes", "created_at")
    readonly_fields = fields
    ordering = ("payment_date", "id")


class LotInline(ReadOnlyInlineMixin, admin.TabularInline):
    """Order items; on stock receipt orders these are the FIFO lots"""

    model = OrderItem
    fields = (
        "product", "name", "qty", "rate", "amount",
        "remaining_qty", "stock_status", "created_at")
    readonly_fields = fields
