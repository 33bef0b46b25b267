from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .company import Company


# ---------- Products (stocked catalog items) ----------
class Product(models.Model):

    # Multi-tenant: each product belongs to a company
    company = models.ForeignKey(Company, on_delete=models.CASCADE)

    # Stock Keeping Unit (optional, unique per company when set)
    sku = models.CharField(max_length=100, null=True, blank=True)
    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)

    # Selling price
    unit_price = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )

    """ Most recent purchase cost (tax exclusive).
    Receiving stock on a bill overwrites it, it is never averaged. """
    cost_price = models.DecimalField(
        max_digits=18, decimal_places=4, default=Decimal("0.0000")
    )

    # Current stock level, moved by bills (in) and invoices (out)
    quantity_on_hand = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )
    reorder_level = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0")
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "name"], name="payables_prod_company_name"),
        ]

        constraints = [
            models.UniqueConstraint(
                fields=["company", "sku"], name="uq_company_product_sku"
            )
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.cost_price is not None and self.cost_price < 0:
            raise ValidationError("Cost price must be >= 0")
        if self.unit_price is not None and self.unit_price < 0:
            raise ValidationError("Unit price must be >= 0")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
