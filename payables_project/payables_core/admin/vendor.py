from django.contrib import admin
from payables_core.models import Vendor, VendorBalanceEntry
from .mixins import TenantAdminMixin


# Register `Vendor` model
@admin.register(Vendor)
class VendorAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "company",
        "name",
        "email",
        "payment_terms_days",
        "balance",
        "is_active",
    )
    search_fields = ("name", "vendor_company_name")
    list_filter = ("company", "is_active")
    # balance is the ledger's cached total
    readonly_fields = ("balance",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company")


# Register `VendorBalanceEntry` model
@admin.register(VendorBalanceEntry)
class VendorBalanceEntryAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id", "company", "vendor", "delta", "reason", "ref_type", "ref_id",
        "created_at")
    list_filter = ("company", "reason")
    search_fields = ("vendor__name", "ref_id")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company", "vendor")

    # Append-only ledger
    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
