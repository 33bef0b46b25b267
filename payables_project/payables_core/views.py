import functools
import json
import logging

from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from .exceptions import (ConflictError, NotFoundError, PayablesError,
                         PersistenceError)
from .services import (available_lots, cancel_bill, create_bill,
                       get_all_bills, get_bill_items, get_bills_by_vendor,
                       record_payment, update_bill, vendor_ledger)

logger = logging.getLogger(__name__)


# ---------- Serialization ----------
# JsonResponse's encoder handles Decimal and date values
def bill_item_to_dict(item):
    return {
        "id": item.pk,
        "bill_id": item.bill_id,
        "product_id": item.product_id,
        "product_name": item.product_name,
        "description": item.description,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "tax_rate": item.tax_rate,
        "tax_amount": item.tax_amount,
        "total_price": item.total_price,
    }


def bill_to_dict(bill, with_items=False):
    data = {
        "id": bill.pk,
        "bill_number": bill.bill_number,
        "vendor_id": bill.vendor_id,
        "order_id": bill.order_id,
        "employee_id": bill.employee_id,
        "bill_date": bill.bill_date,
        "due_date": bill.due_date,
        "payment_method_id": bill.payment_method_id,
        "terms": bill.terms,
        "notes": bill.notes,
        "status": bill.status,
        "total_amount": bill.total_amount,
        "paid_amount": bill.paid_amount,
        "balance_due": bill.balance_due,
        "version": bill.version,
        "created_at": bill.created_at,
        "updated_at": bill.updated_at,
    }
    if with_items:
        data["items"] = [bill_item_to_dict(i) for i in bill.items.all()]
    return data


def bill_summary_to_dict(bill):
    """Row for the bills list, with display names resolved."""
    data = bill_to_dict(bill)
    data.update(
        vendor_name=bill.vendor.name if bill.vendor_id else None,
        payment_method=(
            bill.payment_method.name if bill.payment_method_id else None),
        order_number=bill.order.order_no if bill.order_id else None,
        employee_name=bill.employee.name if bill.employee_id else None,
    )
    return data


def lot_to_dict(lot):
    return {
        "id": lot.pk,
        "order_id": lot.order_id,
        "product_id": lot.product_id,
        "qty": lot.qty,
        "rate": lot.rate,
        "remaining_qty": lot.remaining_qty,
        "stock_status": lot.stock_status,
        "created_at": lot.created_at,
    }


def ledger_entry_to_dict(entry):
    return {
        "id": entry.pk,
        "delta": entry.delta,
        "reason": entry.reason,
        "ref_type": entry.ref_type,
        "ref_id": entry.ref_id,
        "created_at": entry.created_at,
    }


# ---------- Operation boundary ----------
def _error_response(exc):
    if isinstance(exc, ValidationError):
        return JsonResponse(
            {"ok": False, "error": "; ".join(exc.messages)}, status=400)
    if isinstance(exc, NotFoundError):
        status = 404
    elif isinstance(exc, ConflictError):
        status = 409
    elif isinstance(exc, PersistenceError):
        status = 500
    else:
        status = 400
    return JsonResponse({"ok": False, "error": exc.message}, status=status)


def json_operation(view):
    """Turn payables failures into JSON error responses."""
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except (PayablesError, ValidationError) as exc:
            logger.warning(
                "%s %s failed: %s", request.method, request.path, exc)
            return _error_response(exc)
    return wrapper


def _payload(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except ValueError:
        raise ValidationError("Request body must be JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _actor(request):
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return user.get_username()
    return ""


# ---------- Views ----------
@require_http_methods(["POST"])
@json_operation
def create_bill_view(request, company_id):
    bill = create_bill(company_id, _payload(request), actor=_actor(request))
    return JsonResponse(
        {
            "message": "Bill created successfully",
            "billId": bill.pk,
            "billNumber": bill.bill_number,
        },
        status=201,
    )


@require_http_methods(["GET"])
@json_operation
def all_bills_view(request, company_id):
    bills = get_all_bills(company_id)
    return JsonResponse([bill_summary_to_dict(b) for b in bills], safe=False)


@require_http_methods(["GET"])
@json_operation
def bill_items_view(request, company_id, bill_id):
    items = get_bill_items(company_id, bill_id)
    return JsonResponse([bill_item_to_dict(i) for i in items], safe=False)


@require_http_methods(["PUT", "POST"])
@json_operation
def update_bill_view(request, company_id, bill_id):
    bill = update_bill(
        company_id, bill_id, _payload(request), actor=_actor(request))
    return JsonResponse(
        {"message": "Bill updated successfully", "version": bill.version})


@require_http_methods(["POST"])
@json_operation
def cancel_bill_view(request, company_id, bill_id):
    bill = cancel_bill(company_id, bill_id, actor=_actor(request))
    return JsonResponse({"message": "Bill cancelled", "status": bill.status})


@require_http_methods(["GET"])
@json_operation
def bills_by_vendor_view(request, company_id, vendor_id):
    bills = get_bills_by_vendor(company_id, vendor_id)
    return JsonResponse(
        [bill_to_dict(b, with_items=True) for b in bills], safe=False)


@require_http_methods(["POST"])
@json_operation
def record_payment_view(request, company_id, vendor_id):
    payments = record_payment(
        company_id, vendor_id, _payload(request), actor=_actor(request))
    return JsonResponse(
        {
            "message": "Bill Payment recorded successfully",
            "payment_ids": [p.pk for p in payments],
        }
    )


@require_http_methods(["GET"])
@json_operation
def available_lots_view(request, company_id, product_id):
    lots = available_lots(company_id, product_id)
    return JsonResponse([lot_to_dict(lot) for lot in lots], safe=False)


@require_http_methods(["GET"])
@json_operation
def vendor_ledger_view(request, company_id, vendor_id):
    entries = vendor_ledger(company_id, vendor_id)
    return JsonResponse(
        [ledger_entry_to_dict(e) for e in entries], safe=False)
