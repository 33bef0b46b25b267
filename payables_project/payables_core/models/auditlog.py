from django.db import models
from ..managers import TenantManager
from .company import Company


# ---------- Audit / Event log ----------
class AuditLog(models.Model):
    # Associate log entry with a tenant
    company = models.ForeignKey(
        Company,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    # Who triggered the action (username handed over by the HTTP layer),
    # empty for automated runs such as the overdue sweep
    actor = models.CharField(max_length=150, blank=True, default="")
    # Common choices: create, update, cancel, record_payment, mark_overdue
    action = models.CharField(max_length=50)
    object_type = models.CharField(max_length=100)  # e.g. "Bill"
    object_id = models.CharField(max_length=100)
    # Before/after details in JSON format
    changes = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "created_at"],
                name="payables_audit_company_time"),
            models.Index(
                fields=["object_type", "object_id"],
                name="payables_audit_object"),
        ]

    def __str__(self):
        time = self.created_at
        return (
            f"[{time:%Y-%m-%d %H:%M}] {self.actor or 'system'} "
            f"{self.action} {self.object_type}({self.object_id})"
        )
