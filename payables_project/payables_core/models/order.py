from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import LotManager, TenantManager
from .company import Company
from .product import Product
from .vendor import Vendor

ORDER_STATUS_CHOICES = [
    ("open", "Open"),
    ("closed", "Closed"),
]

STOCK_STATUS_CHOICES = [
    ("not_tracked", "Not tracked"),
    ("in_stock", "In stock"),
    ("out_of_stock", "Out of stock"),
]

# order_no of the synthetic goods receipt that mirrors a bill
RECEIPT_ORDER_PREFIX = "BILL-RCPT-"


def receipt_order_no(bill_id):
    return f"{RECEIPT_ORDER_PREFIX}{bill_id}"


# ---------- Orders / OrderItems ----------

# Purchase order placed with a vendor. Bills also get one closed
# "stock receipt" order each, whose items are the FIFO lots.
class Order(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    vendor = models.ForeignKey(
        Vendor, null=True, blank=True, on_delete=models.SET_NULL
    )
    order_no = models.CharField(max_length=100)
    order_date = models.DateField()

    total_amount = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    status = models.CharField(
        max_length=10, choices=ORDER_STATUS_CHOICES, default="open"
    )

    # Stamped when a purchase order is converted into a bill,
    # a second conversion is refused while this is set
    bill = models.ForeignKey(
        "Bill",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="converted_orders",
    )

    # True for the synthetic receipt orders created from bills
    is_stock_receipt = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "vendor"],
                name="payables_order_company_vendor"),
            models.Index(
                fields=["company", "is_stock_receipt"],
                name="payables_order_receipt"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "order_no"], name="uq_company_order_no"
            )
        ]

    def __str__(self):
        return f"Order: {self.order_no}"


class OrderItem(models.Model):
    order = models.ForeignKey(
        Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        Product, null=True, blank=True, on_delete=models.SET_NULL
    )
    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=100, null=True, blank=True)
    description = models.TextField(null=True, blank=True)

    # Pricing: qty x rate = amount
    qty = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0"))
    rate = models.DecimalField(
        max_digits=18, decimal_places=4, default=Decimal("0"))
    amount = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00"))

    received = models.BooleanField(default=False)
    closed = models.BooleanField(default=False)

    """ FIFO lot state.
    remaining_qty starts at qty and is drawn down oldest-first by
    inventory issues; the lot flips to out_of_stock when exhausted. """
    remaining_qty = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("0"))
    stock_status = models.CharField(
        max_length=15, choices=STOCK_STATUS_CHOICES, default="not_tracked"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    objects = LotManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["product", "stock_status", "created_at"],
                name="payables_lot_product_fifo"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(qty__gte=0) &
                models.Q(remaining_qty__gte=0),
                name="oi_non_negative_qty",
            ),
        ]

    def __str__(self):
        return f"{self.name} x {self.qty}"

    def clean(self):
        if self.remaining_qty > self.qty:
            raise ValidationError("Remaining quantity cannot exceed quantity")

    @property
    def consumed_qty(self):
        return self.qty - self.remaining_qty
