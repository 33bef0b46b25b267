import logging
from decimal import Decimal

from django.db.models import F

from ..exceptions import NotFoundError
from ..models import Vendor, VendorBalanceEntry
from .calculator import round2
from .coordinator import require_atomic_block

logger = logging.getLogger(__name__)


def adjust_vendor_balance(vendor_id, company_id, delta, *, reason, ref):
    """
    Move a vendor's running payable balance by ``delta`` and append the
    matching ledger row.

    The cached balance is changed with a single UPDATE ... SET balance =
    balance + delta, so the row lock taken by that statement serialises
    concurrent adjustments until the enclosing transaction ends. A zero
    delta only appends the ledger row.
    """
    require_atomic_block("adjust_vendor_balance")
    delta = round2(Decimal(delta))

    vendors = Vendor.objects.for_company(company_id).filter(pk=vendor_id)
    if delta:
        found = vendors.update(balance=F("balance") + delta)
    else:
        found = vendors.exists()
    if not found:
        raise NotFoundError(f"Vendor {vendor_id} not found")

    entry = VendorBalanceEntry.objects.create(
        company_id=company_id,
        vendor_id=vendor_id,
        delta=delta,
        reason=reason,
        ref_type=ref.__class__.__name__,
        ref_id=str(ref.pk),
    )
    logger.debug(
        "vendor %s balance %+.2f (%s %s:%s)",
        vendor_id, delta, reason, entry.ref_type, entry.ref_id,
    )
    return entry


def vendor_ledger(company_id, vendor_id):
    """Balance entries of one vendor, oldest first."""
    if not Vendor.objects.for_company(company_id).filter(pk=vendor_id).exists():
        raise NotFoundError(f"Vendor {vendor_id} not found")
    return list(
        VendorBalanceEntry.objects.for_company(company_id)
        .filter(vendor_id=vendor_id)
        .order_by("created_at", "id")
    )
