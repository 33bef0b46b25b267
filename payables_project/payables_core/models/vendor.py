from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .company import Company


class Vendor(models.Model):  # Supplier we owe money to (Accounts Payable)

    # Multi-tenant
    company = models.ForeignKey(Company, on_delete=models.CASCADE)

    name = models.CharField(max_length=200)
    vendor_company_name = models.CharField(
        max_length=200, null=True, blank=True)
    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    payment_terms_days = models.IntegerField(default=30)

    """ Running payable balance.
    Cached total of this vendor's VendorBalanceEntry rows,
    only ever moved through the vendor balance ledger service. """
    balance = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "name"], name="payables_vendor_company_name"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError("Vendor name is required")
        return super().clean()

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


BALANCE_REASON_CHOICES = [
    ("bill_created", "Bill created"),
    ("bill_prepaid", "Bill created as paid"),
    ("bill_updated", "Bill total changed"),
    ("bill_reassigned", "Bill moved between vendors"),
    ("bill_cancelled", "Bill cancelled"),
    ("bill_payment", "Bill payment"),
]


# ---------- Vendor balance ledger ----------
class VendorBalanceEntry(models.Model):
    """Append-only record of every change to Vendor.balance."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    vendor = models.ForeignKey(
        Vendor, on_delete=models.PROTECT, related_name="balance_entries"
    )
    # Signed change: positive raises what we owe, negative lowers it
    delta = models.DecimalField(max_digits=15, decimal_places=2)
    reason = models.CharField(max_length=30, choices=BALANCE_REASON_CHOICES)

    # What caused the change, e.g. ("Bill", 12) or ("BillPayment", 40)
    ref_type = models.CharField(max_length=50)
    ref_id = models.CharField(max_length=64)

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "vendor"], name="payables_vbe_company_vendor"),
            models.Index(
                fields=["ref_type", "ref_id"], name="payables_vbe_ref"),
        ]
        verbose_name_plural = "vendor balance entries"

    def __str__(self):
        return f"{self.vendor_id} {self.reason} {self.delta}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Vendor balance entries are append-only.")
        return super().save(*args, **kwargs)
