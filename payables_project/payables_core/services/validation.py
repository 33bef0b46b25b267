"""
Payload checks for the public bill and payment operations.

Everything here runs before a transaction is opened: a payload that fails
raises ValidationError and nothing is read or written.
"""
import datetime
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.utils.dateparse import parse_date as django_parse_date

from .calculator import TWO_PLACES, round2, to_decimal

# Sum of allocations may differ from the payment by at most this much
ALLOCATION_TOLERANCE = Decimal("0.01")

# Header fields an update may change; absent keys keep their stored value
UPDATABLE_HEADER_FIELDS = (
    "vendor_id",
    "order_id",
    "employee_id",
    "bill_date",
    "due_date",
    "payment_method_id",
    "terms",
    "notes",
)


def parse_id(value, field):
    if value in (None, ""):
        return None
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer id")
    if result <= 0:
        raise ValidationError(f"{field} must be a positive id")
    return result


def parse_date(value, field):
    if value in (None, ""):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        # accept full ISO timestamps as sent by browsers
        parsed = django_parse_date(str(value)[:10])
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)")
    return parsed


def parse_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def clean_items(items):
    if not items or not isinstance(items, (list, tuple)):
        raise ValidationError("Items are required")

    cleaned = []
    for position, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValidationError(f"Item {position} is not an object")
        quantity = to_decimal(item.get("quantity"), "quantity")
        price = item.get("cost_price")
        if price in (None, ""):
            price = item.get("unit_price")
        cost_price = to_decimal(price, "cost_price")
        tax_rate = to_decimal(item.get("tax_rate"), "tax_rate")
        if quantity < 0 or cost_price < 0 or tax_rate < 0:
            raise ValidationError(
                f"Item {position}: quantity, price and tax rate must be >= 0")
        cleaned.append({
            "product_id": parse_id(item.get("product_id"), "product_id"),
            "product_name": str(item.get("product_name") or "")[:255],
            "description": item.get("description") or "",
            "quantity": quantity,
            "cost_price": cost_price,
            "tax_rate": tax_rate,
        })
    return cleaned


def clean_bill_payload(payload):
    """Validate a createBill payload."""
    payload = payload or {}
    vendor_id = parse_id(payload.get("vendor_id"), "vendor_id")
    if vendor_id is None:
        raise ValidationError("Vendor is required")
    items = clean_items(payload.get("items"))

    mark_as_paid = parse_bool(payload.get("mark_as_paid", False))
    # bills carry the method as payment_method_id, forms send payment_method
    payment_method_id = parse_id(
        payload.get("payment_method_id", payload.get("payment_method")),
        "payment_method",
    )
    if mark_as_paid and payment_method_id is None:
        raise ValidationError(
            "Payment method is required when marking a bill as paid")

    bill_date = parse_date(payload.get("bill_date"), "bill_date")
    due_date = parse_date(payload.get("due_date"), "due_date")
    if bill_date and due_date and due_date < bill_date:
        raise ValidationError("Due date cannot be before bill date")

    return {
        "vendor_id": vendor_id,
        "items": items,
        "order_id": parse_id(payload.get("order_id"), "order_id"),
        "employee_id": parse_id(payload.get("employee_id"), "employee_id"),
        "bill_number": (payload.get("bill_number") or "").strip() or None,
        "bill_date": bill_date,
        "due_date": due_date,
        "payment_method_id": payment_method_id,
        "mark_as_paid": mark_as_paid,
        "terms": payload.get("terms") or "",
        "notes": payload.get("notes") or "",
    }


def clean_bill_changes(payload):
    """Validate an updateBill payload.

    Returns the new items, the optional expected version and only the
    header fields the caller actually sent.
    """
    payload = dict(payload or {})
    if "payment_method" in payload and "payment_method_id" not in payload:
        payload["payment_method_id"] = payload["payment_method"]

    items = clean_items(payload.get("items"))

    header = {}
    for field in UPDATABLE_HEADER_FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if field.endswith("_id"):
            header[field] = parse_id(value, field)
        elif field.endswith("_date"):
            header[field] = parse_date(value, field)
        else:
            header[field] = value or ""

    if "vendor_id" in header and header["vendor_id"] is None:
        raise ValidationError("Vendor is required")

    version = payload.get("version")
    if version not in (None, ""):
        try:
            version = int(version)
        except (TypeError, ValueError):
            raise ValidationError("version must be an integer")
    else:
        version = None

    return {"items": items, "header": header, "version": version}


def clean_payment_payload(payload):
    """Validate a recordPayment payload, including the allocation sum."""
    payload = payload or {}

    payment_amount = to_decimal(payload.get("payment_amount"), "payment_amount")
    if payment_amount <= 0:
        raise ValidationError("Valid payment amount is required")

    payment_date = parse_date(payload.get("payment_date"), "payment_date")
    if payment_date is None:
        raise ValidationError("Payment date is required")

    payment_method = str(payload.get("payment_method") or "").strip()
    if not payment_method:
        raise ValidationError("Payment method is required")

    bill_payments = payload.get("bill_payments")
    if not bill_payments or not isinstance(bill_payments, (list, tuple)):
        raise ValidationError("Bill payment distribution is required")

    allocations = []
    for entry in bill_payments:
        if not isinstance(entry, dict):
            raise ValidationError("Invalid bill ID or payment amount")
        bill_id = parse_id(entry.get("bill_id"), "bill_id")
        amount = to_decimal(entry.get("payment_amount"), "payment_amount")
        if bill_id is None or amount <= 0:
            raise ValidationError("Invalid bill ID or payment amount")
        if amount.quantize(TWO_PLACES) != amount:
            raise ValidationError("Payment amounts cannot exceed 2 decimals")
        allocations.append({"bill_id": bill_id, "payment_amount": amount})

    allocated = sum((a["payment_amount"] for a in allocations), Decimal("0"))
    if abs(allocated - payment_amount) > ALLOCATION_TOLERANCE:
        raise ValidationError(
            "Sum of bill payments does not match total payment amount")

    return {
        "payment_amount": round2(payment_amount),
        "payment_date": payment_date,
        "payment_method": payment_method[:50],
        "deposit_to": str(payload.get("deposit_to") or "")[:100],
        "notes": payload.get("notes") or "",
        "allocations": allocations,
    }
