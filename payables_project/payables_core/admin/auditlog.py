from django.contrib import admin

from payables_core.models import AuditLog

from .mixins import TenantAdminMixin


# Register `AuditLog` model
@admin.register(AuditLog)
class AuditLogAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "company",
        "actor",
        "action",
        "object_type",
        "object_id",
        "created_at",
    )
    search_fields = ("object_type", "object_id", "actor")
    list_filter = ("company", "action", "created_at")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company")

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False
