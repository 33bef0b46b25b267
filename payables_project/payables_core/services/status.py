from decimal import Decimal

from ..models.bill import FROZEN_STATUSES

ZERO = Decimal("0")

# Only these may be flipped to overdue by the read path and the sweep
OVERDUE_CANDIDATES = ("opened", "partially_paid")


def apply_overdue(status, due_date, balance_due, today):
    """Override to overdue once the due date has passed with money owed."""
    if (
        due_date is not None
        and status not in ("paid", "cancelled", "proforma")
        and due_date < today
        and balance_due > ZERO
    ):
        return "overdue"
    return status


def status_after_edit(current, total_amount, paid_amount, due_date, today):
    if current in FROZEN_STATUSES:
        return current
    balance_due = total_amount - paid_amount
    if balance_due <= ZERO and total_amount > ZERO:
        status = "paid"
    elif ZERO < paid_amount < total_amount:
        status = "partially_paid"
    else:
        status = "opened"
    return apply_overdue(status, due_date, balance_due, today)


def status_after_payment(current, total_amount, paid_amount, due_date, today):
    if current in FROZEN_STATUSES:
        return current
    status = "opened"
    if paid_amount >= total_amount:
        status = "paid"
    elif paid_amount > ZERO:
        status = "partially_paid"
    return apply_overdue(
        status, due_date, total_amount - paid_amount, today)


def is_overdue_candidate(bill, today):
    return (
        bill.status in OVERDUE_CANDIDATES
        and apply_overdue(
            bill.status, bill.due_date, bill.balance_due, today) == "overdue"
    )
