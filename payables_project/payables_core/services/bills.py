import logging
import secrets
from decimal import Decimal

from django.db.models import F
from django.utils import timezone

from ..exceptions import ConflictError, NotFoundError, StaleDocumentError
from ..models import (Bill, BillItem, BillPayment, Company, Employee, Order,
                      PaymentMethod, Product, Vendor)
from .audit_helper import log_action
from .calculator import calculate_lines
from .coordinator import atomic_operation
from .status import is_overdue_candidate, status_after_edit
from .stock_receipt import (create_receipt_for, receive_stock,
                            release_receipt_for, replace_receipt_for,
                            revert_stock)
from .validation import clean_bill_changes, clean_bill_payload
from .vendor_balance import adjust_vendor_balance

logger = logging.getLogger(__name__)


# ----------------------------
# Lookups scoped to a company
# ----------------------------
def _get_company(company_id):
    company = Company.objects.filter(pk=company_id).first()
    if company is None:
        raise NotFoundError(f"Company {company_id} not found")
    return company


def _get_vendor(company, vendor_id):
    vendor = Vendor.objects.for_company(company).filter(pk=vendor_id).first()
    if vendor is None:
        raise NotFoundError(f"Vendor {vendor_id} not found")
    return vendor


def _get_optional(model, company, pk, label):
    if pk is None:
        return None
    queryset = model.objects.all()
    if company is not None:
        queryset = queryset.filter(company=company)
    obj = queryset.filter(pk=pk).first()
    if obj is None:
        raise NotFoundError(f"{label} {pk} not found")
    return obj


def _lock_bill(company, bill_id):
    bill = (
        Bill.objects.for_company(company)
        .select_for_update()
        .filter(pk=bill_id)
        .first()
    )
    if bill is None:
        raise NotFoundError("Bill not found")
    return bill


def _check_products(company, lines):
    wanted = {line["product_id"] for line in lines if line.get("product_id")}
    if not wanted:
        return
    found = set(
        Product.objects.for_company(company)
        .filter(pk__in=wanted)
        .values_list("pk", flat=True)
    )
    missing = sorted(wanted - found)
    if missing:
        raise NotFoundError(f"Product {missing[0]} not found")


def _lock_source_order(company, order_id, bill=None):
    """Lock a purchase order for conversion, refusing double conversion."""
    order = (
        Order.objects.for_company(company)
        .select_for_update()
        .filter(pk=order_id, is_stock_receipt=False)
        .first()
    )
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    if order.bill_id is not None and (bill is None or order.bill_id != bill.pk):
        raise ConflictError("This order has already been converted to a bill")
    return order


# ----------------------------
# Bill numbers
# ----------------------------
def generate_bill_number(company, max_tries=20):
    """Timestamp plus random suffix, retried until unused in the company."""
    for _ in range(max_tries):
        stamp = timezone.now().strftime("%Y%m%d%H%M%S")
        candidate = f"BILL-{stamp}-{secrets.randbelow(10000):04d}"
        if not Bill.objects.for_company(company).filter(
                bill_number=candidate).exists():
            return candidate
    raise ConflictError("Could not generate a unique bill number")


def _item_rows(company, bill, lines):
    return [
        BillItem(
            company=company,
            bill=bill,
            product_id=line.get("product_id"),
            product_name=line.get("product_name") or "",
            description=line.get("description") or "",
            quantity=line["quantity"],
            unit_price=line["actual_unit_price"],
            tax_rate=line["tax_rate"],
            tax_amount=line["tax_amount"],
            total_price=line["total_price"],
        )
        for line in lines
    ]


# ------------------------------------
# Create
# ------------------------------------
def create_bill(company_id, payload, actor=""):
    """
    Create a vendor bill with its items, stock receipt and vendor liability.

    Returns the saved Bill. Payload problems raise ValidationError before
    any transaction is opened.
    """
    data = clean_bill_payload(payload)
    return _create_bill(company_id, data, actor)


@atomic_operation("create_bill")
def _create_bill(company_id, data, actor):
    company = _get_company(company_id)
    vendor = _get_vendor(company, data["vendor_id"])
    employee = _get_optional(Employee, company, data["employee_id"], "Employee")
    payment_method = _get_optional(
        PaymentMethod, None, data["payment_method_id"], "Payment method")

    order = None
    if data["order_id"]:
        order = _lock_source_order(company, data["order_id"])

    bill_number = data["bill_number"]
    if bill_number:
        if Bill.objects.for_company(company).filter(
                bill_number=bill_number).exists():
            raise ConflictError(f"Bill number {bill_number} already exists")
    else:
        bill_number = generate_bill_number(company)

    # Client supplied totals are never trusted
    lines, total = calculate_lines(data["items"])
    _check_products(company, lines)

    if data["mark_as_paid"]:
        status, paid_amount = "paid", total
    else:
        status, paid_amount = "opened", Decimal("0.00")

    bill = Bill(
        company=company,
        vendor=vendor,
        order=order,
        employee=employee,
        bill_number=bill_number,
        bill_date=data["bill_date"],
        due_date=data["due_date"],
        payment_method=payment_method,
        terms=data["terms"],
        notes=data["notes"],
        status=status,
        total_amount=total,
        paid_amount=paid_amount,
    )
    bill.refresh_balance()
    bill.full_clean(exclude=["stock_receipt_order"])
    bill.save()

    BillItem.objects.bulk_create(_item_rows(company, bill, lines))

    # Stamp the purchase order so it cannot be converted twice
    if order is not None:
        Order.objects.filter(pk=order.pk).update(bill=bill)

    if data["mark_as_paid"]:
        # The liability never stays outstanding: record the payment for the
        # audit trail and a zero movement on the vendor ledger
        if total > 0:
            BillPayment.objects.create(
                company=company,
                bill=bill,
                vendor=vendor,
                payment_amount=total,
                payment_date=bill.bill_date or timezone.localdate(),
                payment_method=payment_method.name[:50],
                notes="Paid on bill creation",
            )
        adjust_vendor_balance(
            vendor.pk, company.pk, 0, reason="bill_prepaid", ref=bill)
    else:
        adjust_vendor_balance(
            vendor.pk, company.pk, total, reason="bill_created", ref=bill)

    receive_stock(company.pk, lines)
    create_receipt_for(bill, lines)

    log_action(
        action="create",
        instance=bill,
        actor=actor,
        changes={
            "bill_number": bill.bill_number,
            "total_amount": str(bill.total_amount),
            "status": bill.status,
        },
    )
    logger.info(
        "bill %s created for vendor %s total=%s status=%s",
        bill.bill_number, vendor.pk, bill.total_amount, bill.status,
    )
    return bill


# ------------------------------------
# Update
# ------------------------------------
def update_bill(company_id, bill_id, payload, actor=""):
    """
    Replace a bill's items and header fields.

    State is rebuilt rather than patched: stock from the stored items is
    taken back first, then the new items are priced, stocked and mirrored
    into the receipt lots. paid_amount is never touched here.
    Passing ``version`` makes the update fail with StaleDocumentError if the
    bill changed since it was read.
    """
    data = clean_bill_changes(payload)
    return _update_bill(company_id, bill_id, data, actor)


@atomic_operation("update_bill")
def _update_bill(company_id, bill_id, data, actor):
    company = _get_company(company_id)
    bill = _lock_bill(company, bill_id)
    if data["version"] is not None and data["version"] != bill.version:
        raise StaleDocumentError(
            "Bill was changed by someone else, reload and try again")

    header = data["header"]
    old_vendor_id = bill.vendor_id
    old_total = bill.total_amount
    old_balance = bill.balance_due
    # Cancelled bills already gave back their stock and liability
    has_effects = bill.status != "cancelled"

    old_items = list(bill.items.all())
    if has_effects:
        # Undo the original receipt before applying new quantities
        revert_stock(company.pk, old_items)

    lines, total = calculate_lines(data["items"])
    _check_products(company, lines)

    if "vendor_id" in header and header["vendor_id"] != bill.vendor_id:
        bill.vendor = _get_vendor(company, header["vendor_id"])
    if "employee_id" in header:
        bill.employee = _get_optional(
            Employee, company, header["employee_id"], "Employee")
    if "payment_method_id" in header:
        bill.payment_method = _get_optional(
            PaymentMethod, None, header["payment_method_id"], "Payment method")
    for field in ("bill_date", "due_date", "terms", "notes"):
        if field in header:
            setattr(bill, field, header[field])

    old_order_id = bill.order_id
    if "order_id" in header and header["order_id"] != old_order_id:
        if not has_effects:
            raise ConflictError(
                "Cancelled bills cannot be linked to an order")
        new_order = None
        if header["order_id"]:
            new_order = _lock_source_order(company, header["order_id"], bill)
        bill.order = new_order

    bill.total_amount = total
    bill.refresh_balance()
    bill.status = status_after_edit(
        bill.status, bill.total_amount, bill.paid_amount, bill.due_date,
        timezone.localdate(),
    )
    bill.clean()

    # Conditional write: a concurrent edit that bumped the version wins
    # the race and this one fails instead of silently overwriting it
    updated = Bill.objects.filter(pk=bill.pk, version=bill.version).update(
        vendor_id=bill.vendor_id,
        order_id=bill.order_id,
        employee_id=bill.employee_id,
        payment_method_id=bill.payment_method_id,
        bill_date=bill.bill_date,
        due_date=bill.due_date,
        terms=bill.terms,
        notes=bill.notes,
        total_amount=bill.total_amount,
        balance_due=bill.balance_due,
        status=bill.status,
        version=F("version") + 1,
        updated_at=timezone.now(),
    )
    if not updated:
        raise StaleDocumentError(
            "Bill was changed by someone else, reload and try again")
    bill.version += 1

    if bill.order_id != old_order_id:
        if old_order_id:
            Order.objects.filter(pk=old_order_id, bill=bill).update(bill=None)
        if bill.order_id:
            Order.objects.filter(pk=bill.order_id).update(bill=bill)

    bill.items.all().delete()
    BillItem.objects.bulk_create(_item_rows(company, bill, lines))

    if has_effects:
        receive_stock(company.pk, lines)
        replace_receipt_for(bill, lines)

        if bill.vendor_id != old_vendor_id:
            # The bill's outstanding balance moves with it
            adjust_vendor_balance(
                old_vendor_id, company.pk, -old_balance,
                reason="bill_reassigned", ref=bill)
            adjust_vendor_balance(
                bill.vendor_id, company.pk, bill.balance_due,
                reason="bill_reassigned", ref=bill)
        elif bill.total_amount != old_total:
            adjust_vendor_balance(
                bill.vendor_id, company.pk, bill.total_amount - old_total,
                reason="bill_updated", ref=bill)

    log_action(
        action="update",
        instance=bill,
        actor=actor,
        changes={
            "total_amount": [str(old_total), str(bill.total_amount)],
            "balance_due": [str(old_balance), str(bill.balance_due)],
            "status": bill.status,
            "items": len(lines),
        },
    )
    logger.info(
        "bill %s updated total %s -> %s status=%s",
        bill.pk, old_total, bill.total_amount, bill.status,
    )
    return bill


# ------------------------------------
# Cancel
# ------------------------------------
@atomic_operation("cancel_bill")
def cancel_bill(company_id, bill_id, actor=""):
    """
    Cancel a bill and reverse its stock and outstanding liability.

    Payments already recorded stay untouched (they are immutable); only the
    unpaid balance comes off the vendor. Refused when stock from the bill has
    already been issued.
    """
    company = _get_company(company_id)
    bill = _lock_bill(company, bill_id)
    if bill.status == "cancelled":
        raise ConflictError("Bill is already cancelled")

    release_receipt_for(bill)
    revert_stock(company.pk, list(bill.items.all()))
    if bill.balance_due:
        adjust_vendor_balance(
            bill.vendor_id, company.pk, -bill.balance_due,
            reason="bill_cancelled", ref=bill)

    # Free the purchase order for a fresh conversion
    Order.objects.filter(bill=bill).update(bill=None)

    previous = bill.status
    Bill.objects.filter(pk=bill.pk).update(
        status="cancelled",
        order=None,
        version=F("version") + 1,
        updated_at=timezone.now(),
    )
    bill.refresh_from_db()

    log_action(
        action="cancel",
        instance=bill,
        actor=actor,
        changes={"status": [previous, "cancelled"]},
    )
    logger.info("bill %s cancelled (was %s)", bill.pk, previous)
    return bill


# ------------------------------------
# Reads
# ------------------------------------
def get_all_bills(company_id):
    """Company bills, newest first, with display relations resolved."""
    return list(
        Bill.objects.for_company(company_id)
        .select_related("vendor", "payment_method", "order", "employee")
        .order_by("-created_at", "-id")
    )


def get_bill_items(company_id, bill_id):
    bill = Bill.objects.for_company(company_id).filter(pk=bill_id).first()
    if bill is None:
        raise NotFoundError("Bill not found")
    return list(bill.items.select_related("product").order_by("id"))


def mark_overdue(bills, today, actor=""):
    """
    Flip opened / partially paid bills whose due date has passed with money
    owed to overdue. Must run inside the caller's transaction.
    Returns the bills that changed.
    """
    flipped = []
    for bill in bills:
        if not is_overdue_candidate(bill, today):
            continue
        # guard on the status we read so a concurrent payment is not undone
        changed = Bill.objects.filter(pk=bill.pk, status=bill.status).update(
            status="overdue",
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        if not changed:
            continue
        log_action(
            action="mark_overdue",
            instance=bill,
            actor=actor,
            changes={"status": [bill.status, "overdue"]},
        )
        bill.status = "overdue"
        bill.version += 1
        flipped.append(bill)
    return flipped


@atomic_operation("get_bills_by_vendor")
def get_bills_by_vendor(company_id, vendor_id, today=None):
    """
    Bills of one vendor, newest first, items prefetched.
    Bills found past due are switched to overdue as part of the read.
    """
    company = _get_company(company_id)
    vendor = _get_vendor(company, vendor_id)
    bills = list(
        Bill.objects.for_company(company)
        .filter(vendor=vendor)
        .prefetch_related("items")
        .order_by("-created_at", "-id")
    )
    flipped = mark_overdue(bills, today or timezone.localdate())
    if flipped:
        logger.info(
            "vendor %s: %d bill(s) marked overdue on read",
            vendor.pk, len(flipped),
        )
    return bills
