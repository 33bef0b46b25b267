from django.contrib import admin
from payables_core.models import Bill, BillPayment
from .actions import cancel_selected_bills
from .inlines import BillItemInline, BillPaymentInline
from .mixins import TenantAdminMixin


# Register `Bill` model
@admin.register(Bill)
class BillAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "company",
        "bill_number",
        "vendor",
        "bill_date",
        "due_date",
        "status",
        "total_amount",
        "paid_amount",
        "balance_due",
    )
    list_filter = ("company", "status", "bill_date")
    actions = [cancel_selected_bills]
    search_fields = ("bill_number", "vendor__name")
    inlines = [BillItemInline, BillPaymentInline]

    # Fetch everything in one SQL join
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company", "vendor", "payment_method")

    """ Amounts, status and stock move only through the bill services """

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return [f.name for f in self.model._meta.fields]
        return super().get_readonly_fields(request, obj)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False  # bills are cancelled, never deleted


# Register `BillPayment` model
@admin.register(BillPayment)
class BillPaymentAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "company",
        "bill",
        "vendor",
        "payment_date",
        "payment_amount",
        "payment_method",
    )
    list_filter = ("company", "payment_date")
    search_fields = ("bill__bill_number", "vendor__name")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company", "bill", "vendor")

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
