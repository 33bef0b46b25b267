from django.contrib import admin
from payables_core.models import Company, Employee, PaymentMethod
from .mixins import TenantAdminMixin


# Register `Company` model
@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "currency_code", "created_at")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Employee)
class EmployeeAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("id", "company", "name", "email", "is_active")
    list_filter = ("company", "is_active")
    search_fields = ("name", "email")


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)
