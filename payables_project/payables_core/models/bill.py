from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .company import Company, Employee
from .order import Order
from .payment_method import PaymentMethod
from .product import Product
from .vendor import Vendor

BILL_STATUS_CHOICES = [
    ("opened", "Opened"),
    ("partially_paid", "Partially paid"),
    ("paid", "Paid"),
    ("overdue", "Overdue"),
    ("cancelled", "Cancelled"),
    ("proforma", "Proforma"),
]

# Statuses that no edit, payment or overdue check may move a bill out of
FROZEN_STATUSES = ("proforma", "cancelled")

# ---------- Bills / BillItems / BillPayments ----------

# Header represents vendor bill (Accounts Payable document)


class Bill(models.Model):
    # Bill belongs to a company (multi-tenant)
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    vendor = models.ForeignKey(
        Vendor,
        # prevent deleting vendor who has a bill
        on_delete=models.PROTECT,
        related_name="bills",
    )
    # Purchase order this bill was converted from
    order = models.ForeignKey(
        Order,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    employee = models.ForeignKey(
        Employee, null=True, blank=True, on_delete=models.SET_NULL
    )

    # Unique per company, generated when the caller sends none
    bill_number = models.CharField(max_length=64)
    bill_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    payment_method = models.ForeignKey(
        PaymentMethod, null=True, blank=True, on_delete=models.PROTECT
    )
    terms = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=20, choices=BILL_STATUS_CHOICES, default="opened"
    )

    # Sum of all bill item totals (tax inclusive)
    total_amount = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    # Moved only by payments, never by item edits
    paid_amount = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    # Always total_amount - paid_amount
    balance_due = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )

    # The closed goods receipt whose items are this bill's FIFO lots
    stock_receipt_order = models.OneToOneField(
        Order,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="receipt_for_bill",
    )

    # Optimistic concurrency stamp, bumped by every mutation
    version = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "vendor"],
                name="payables_bill_company_vendor"),
            models.Index(
                fields=["company", "status"],
                name="payables_bill_company_status"),
            models.Index(
                fields=["company", "due_date"],
                name="payables_bill_company_due"),
        ]

        constraints = [
            # Within one company, each bill number must be unique
            # Across companies, duplicates are allowed
            models.UniqueConstraint(
                fields=["company", "bill_number"],
                name="uq_bill_company_number"
            )
        ]

    def __str__(self):
        return f"Bill: {self.bill_number or self.pk}"

    @property
    def is_frozen(self):
        return self.status in FROZEN_STATUSES

    def refresh_balance(self):
        """Keep balance_due in step with total and paid amounts."""
        self.balance_due = (
            self.total_amount - self.paid_amount
        ).quantize(Decimal("0.01"))
        return self.balance_due

    def clean(self):
        # Tenant safety check
        if self.vendor_id and self.company_id:
            if self.vendor.company_id != self.company_id:
                raise ValidationError(
                    "Vendor must belong to the same company.")
        if (self.bill_date and self.due_date
                and self.due_date < self.bill_date):
            raise ValidationError("Due date cannot be before bill date.")


class BillItem(models.Model):
    """Detail line; replaced as a whole whenever its bill is edited."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    bill = models.ForeignKey(
        Bill, on_delete=models.CASCADE, related_name="items")

    # Nullable for lines that are not catalog products (freight, services)
    product = models.ForeignKey(
        Product,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
    )
    product_name = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")

    quantity = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("1")
    )
    # Tax exclusive
    unit_price = models.DecimalField(
        max_digits=18, decimal_places=4, default=Decimal("0.0000")
    )
    tax_rate = models.DecimalField(
        max_digits=7, decimal_places=4, default=Decimal("0")
    )
    tax_amount = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    # Tax inclusive
    total_price = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "bill"],
                name="payables_bitem_company_bill"),
            models.Index(
                fields=["company", "product"],
                name="payables_bitem_company_prod"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0) &
                models.Q(unit_price__gte=0) &
                models.Q(tax_rate__gte=0),
                name="bi_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"{self.product_name or self.product_id} x {self.quantity}"


class BillPayment(models.Model):
    """One fragment of a vendor payment applied to a single bill.

    Rows are append-only: they are never edited or deleted once written.
    """

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    bill = models.ForeignKey(
        Bill, on_delete=models.PROTECT, related_name="payments")
    vendor = models.ForeignKey(
        Vendor, on_delete=models.PROTECT, related_name="bill_payments")

    payment_amount = models.DecimalField(max_digits=15, decimal_places=2)
    payment_date = models.DateField()
    payment_method = models.CharField(max_length=50)
    deposit_to = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "bill"],
                name="payables_bpay_company_bill"),
            models.Index(
                fields=["company", "vendor"],
                name="payables_bpay_company_vendor"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(payment_amount__gt=0),
                name="bp_positive_amount",
            ),
        ]

    def __str__(self):
        return f"Payment {self.payment_amount} on bill {self.bill_id}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Bill payments cannot be modified.")
        return super().save(*args, **kwargs)
