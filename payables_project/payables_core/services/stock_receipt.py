"""
Stock receipts for bills.

Each bill is mirrored by a closed "receipt" Order whose OrderItems are FIFO
lots: full quantity available, ``in_stock``, drawn down oldest-first by the
invoicing side. Product stock levels and last cost move with the receipts.
"""
import logging
from decimal import Decimal

from django.db.models import F
from django.utils import timezone

from ..exceptions import ConflictError, NotFoundError
from ..models import Order, OrderItem, Product
from ..models.order import receipt_order_no
from .calculator import round2
from .coordinator import require_atomic_block

logger = logging.getLogger(__name__)


# ---------- Product stock levels ----------
def receive_stock(company_id, lines):
    """Add received quantities and overwrite cost with the latest price."""
    require_atomic_block("receive_stock")
    for line in lines:
        if not line.get("product_id"):
            continue
        updated = Product.objects.for_company(company_id).filter(
            pk=line["product_id"]
        ).update(
            quantity_on_hand=F("quantity_on_hand") + line["quantity"],
            cost_price=line["actual_unit_price"],
        )
        if not updated:
            raise NotFoundError(f"Product {line['product_id']} not found")


def revert_stock(company_id, bill_items):
    """Take back quantities a bill's stored items had added."""
    require_atomic_block("revert_stock")
    for item in bill_items:
        if not item.product_id:
            continue
        Product.objects.for_company(company_id).filter(
            pk=item.product_id
        ).update(quantity_on_hand=F("quantity_on_hand") - item.quantity)


# ---------- Receipt orders ----------
def _lot_rows(order, lines):
    return [
        OrderItem(
            order=order,
            product_id=line.get("product_id"),
            name=line.get("product_name") or "",
            description=line.get("description") or "",
            qty=line["quantity"],
            rate=line["actual_unit_price"],
            amount=round2(line["quantity"] * line["actual_unit_price"]),
            received=True,
            closed=True,
            remaining_qty=line["quantity"],
            stock_status="in_stock",
        )
        for line in lines
    ]


def _find_receipt(bill):
    if bill.stock_receipt_order_id:
        return Order.objects.select_for_update().filter(
            pk=bill.stock_receipt_order_id).first()
    # bills created before the back-reference existed
    return Order.objects.for_company(bill.company_id).select_for_update().filter(
        order_no=receipt_order_no(bill.pk), is_stock_receipt=True
    ).first()


def create_receipt_for(bill, lines):
    """Create the bill's receipt order and lots; replaces them if present."""
    require_atomic_block("create_receipt_for")
    if _find_receipt(bill) is not None:
        return replace_receipt_for(bill, lines)

    order = Order.objects.create(
        company_id=bill.company_id,
        vendor_id=bill.vendor_id,
        order_no=receipt_order_no(bill.pk),
        order_date=bill.bill_date or timezone.localdate(),
        total_amount=bill.total_amount,
        status="closed",
        is_stock_receipt=True,
    )
    OrderItem.objects.bulk_create(_lot_rows(order, lines))
    type(bill).objects.filter(pk=bill.pk).update(stock_receipt_order=order)
    bill.stock_receipt_order = order
    logger.debug("receipt %s created with %d lots", order.order_no, len(lines))
    return order


def replace_receipt_for(bill, lines):
    """Make the bill's receipt lots mirror ``lines`` exactly."""
    require_atomic_block("replace_receipt_for")
    order = _find_receipt(bill)
    if order is None:
        return create_receipt_for(bill, lines)

    order.items.all().delete()
    OrderItem.objects.bulk_create(_lot_rows(order, lines))
    order.total_amount = bill.total_amount
    order.vendor_id = bill.vendor_id
    order.save(update_fields=["total_amount", "vendor"])
    if bill.stock_receipt_order_id != order.pk:
        type(bill).objects.filter(pk=bill.pk).update(stock_receipt_order=order)
        bill.stock_receipt_order = order
    logger.debug("receipt %s replaced with %d lots", order.order_no, len(lines))
    return order


def release_receipt_for(bill):
    """Withdraw a cancelled bill's lots. Consumed lots cannot be withdrawn."""
    require_atomic_block("release_receipt_for")
    order = _find_receipt(bill)
    if order is None:
        return None
    lots = list(order.items.select_for_update())
    if any(lot.remaining_qty < lot.qty for lot in lots if lot.product_id):
        raise ConflictError(
            "Stock from this bill has already been sold and cannot be reversed")
    order.items.update(remaining_qty=Decimal("0"), stock_status="out_of_stock")
    return order


# ---------- FIFO lookup ----------
def available_lots(company_id, product_id):
    """In-stock receipt lots for a product, oldest first."""
    product = Product.objects.for_company(company_id).filter(
        pk=product_id).first()
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return list(OrderItem.objects.fifo(company_id, product))
