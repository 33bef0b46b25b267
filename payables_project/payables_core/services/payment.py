import logging

from django.db.models import F
from django.utils import timezone

from ..exceptions import ConflictError, NotFoundError
from ..models import Bill, BillPayment, Company, Vendor
from .audit_helper import log_action
from .calculator import round2
from .coordinator import atomic_operation
from .status import status_after_payment
from .validation import clean_payment_payload
from .vendor_balance import adjust_vendor_balance

logger = logging.getLogger(__name__)


# ----------------------------
# Payment allocation workflows
# ----------------------------
def record_payment(company_id, vendor_id, payload, actor=""):
    """
    Spread one vendor payment over several of the vendor's bills.

    ``payload["bill_payments"]`` is a list of ``{bill_id, payment_amount}``
    whose amounts must add up to ``payment_amount`` (within 0.01). Each
    fragment becomes a BillPayment row, lowers the vendor balance and moves
    the bill's paid amount, balance and status. Either every fragment is
    applied or none is.
    """
    data = clean_payment_payload(payload)
    return _apply_payment(company_id, vendor_id, data, actor)


@atomic_operation("record_payment")
def _apply_payment(company_id, vendor_id, data, actor):
    company = Company.objects.filter(pk=company_id).first()
    if company is None:
        raise NotFoundError(f"Company {company_id} not found")
    vendor = Vendor.objects.for_company(company).filter(pk=vendor_id).first()
    if vendor is None:
        raise NotFoundError(f"Vendor {vendor_id} not found")

    today = timezone.localdate()
    payments = []
    for allocation in data["allocations"]:
        amount = round2(allocation["payment_amount"])

        # Lock the bill row until the whole payment commits
        bill = (
            Bill.objects.for_company(company)
            .select_for_update()
            .filter(pk=allocation["bill_id"], vendor=vendor)
            .first()
        )
        if bill is None:
            raise NotFoundError(f"Bill {allocation['bill_id']} not found")
        if bill.status == "cancelled":
            raise ConflictError(f"Bill {bill.pk} is cancelled")

        new_paid = round2(bill.paid_amount + amount)
        balance_due = round2(bill.total_amount - new_paid)
        status = status_after_payment(
            bill.status, bill.total_amount, new_paid, bill.due_date, today)

        payment = BillPayment.objects.create(
            company=company,
            bill=bill,
            vendor=vendor,
            payment_amount=amount,
            payment_date=data["payment_date"],
            payment_method=data["payment_method"],
            deposit_to=data["deposit_to"],
            notes=data["notes"],
        )

        adjust_vendor_balance(
            vendor.pk, company.pk, -amount, reason="bill_payment", ref=payment)

        Bill.objects.filter(pk=bill.pk).update(
            paid_amount=new_paid,
            balance_due=balance_due,
            status=status,
            version=F("version") + 1,
            updated_at=timezone.now(),
        )

        log_action(
            action="record_payment",
            instance=bill,
            actor=actor,
            changes={
                "payment_id": payment.pk,
                "amount": str(amount),
                "paid_amount": [str(bill.paid_amount), str(new_paid)],
                "status": [bill.status, status],
            },
        )
        payments.append(payment)

    logger.info(
        "vendor %s payment of %s spread over %d bill(s)",
        vendor.pk, data["payment_amount"], len(payments),
    )
    return payments
