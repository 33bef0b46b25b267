from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..exceptions import ConflictError, NotFoundError, StaleDocumentError
from ..models import Bill, Order, Vendor, VendorBalanceEntry
from ..services import (available_lots, cancel_bill, record_payment,
                        update_bill)
from .base import PayablesTestData


def items(quantity="2", cost_price="100", tax_rate="10", product=None):
    line = {"quantity": quantity, "cost_price": cost_price,
            "tax_rate": tax_rate}
    if product is not None:
        line["product_id"] = product.pk
    return [line]


class UpdateBillTests(PayablesTestData, TestCase):

    def setUp(self):
        super().setUp()
        self.bill = self.make_bill()

    def update(self, **payload):
        payload.setdefault("items", items(product=self.product))
        return update_bill(self.company.pk, self.bill.pk, payload)

    def test_same_items_twice_changes_nothing(self):
        self.update()
        self.update()
        self.refresh(self.bill, self.vendor, self.product)

        self.assertEqual(self.bill.total_amount, Decimal("220.00"))
        self.assertEqual(self.bill.balance_due, Decimal("220.00"))
        self.assertEqual(self.product.quantity_on_hand, Decimal("2"))
        self.assertEqual(self.vendor.balance, Decimal("220.00"))
        self.assertEqual(len(available_lots(self.company.pk, self.product.pk)), 1)
        # unchanged totals leave no ledger trace
        self.assertEqual(
            VendorBalanceEntry.objects.filter(vendor=self.vendor).count(), 1)

    def test_quantity_change_moves_stock_and_liability(self):
        self.update(items=items(quantity="5", product=self.product))
        self.refresh(self.bill, self.vendor, self.product)

        self.assertEqual(self.bill.total_amount, Decimal("550.00"))
        self.assertEqual(self.product.quantity_on_hand, Decimal("5"))
        self.assertEqual(self.vendor.balance, Decimal("550.00"))

        entry = VendorBalanceEntry.objects.filter(
            reason="bill_updated").get()
        self.assertEqual(entry.delta, Decimal("330.00"))

        lot = available_lots(self.company.pk, self.product.pk)[0]
        self.assertEqual(lot.qty, Decimal("5"))
        self.assertEqual(lot.remaining_qty, Decimal("5"))
        self.assertEqual(
            Bill.objects.get(pk=self.bill.pk).stock_receipt_order.total_amount,
            Decimal("550.00"))

    def test_paid_amount_survives_edit(self):
        record_payment(self.company.pk, self.vendor.pk,
                       self.payment([(self.bill, "100.00")]))
        self.update(items=items(quantity="3", product=self.product))
        self.refresh(self.bill, self.vendor)

        self.assertEqual(self.bill.paid_amount, Decimal("100.00"))
        self.assertEqual(self.bill.total_amount, Decimal("330.00"))
        self.assertEqual(self.bill.balance_due, Decimal("230.00"))
        self.assertEqual(self.bill.status, "partially_paid")
        self.assertEqual(self.vendor.balance, Decimal("230.00"))

    def test_edit_below_paid_amount_keeps_bill_paid(self):
        record_payment(self.company.pk, self.vendor.pk,
                       self.payment([(self.bill, "220.00")]))
        self.update(items=items(quantity="1", product=self.product))
        self.bill.refresh_from_db()

        self.assertEqual(self.bill.status, "paid")
        self.assertEqual(self.bill.balance_due, Decimal("-110.00"))

    def test_edit_above_paid_amount_reopens(self):
        record_payment(self.company.pk, self.vendor.pk,
                       self.payment([(self.bill, "220.00")]))
        self.update(items=items(quantity="4", product=self.product))
        self.bill.refresh_from_db()
        self.assertEqual(self.bill.status, "partially_paid")

    def test_edit_with_past_due_date_flips_to_overdue(self):
        self.update(
            bill_date=self.days(-30).isoformat(),
            due_date=self.days(-1).isoformat())
        self.bill.refresh_from_db()
        self.assertEqual(self.bill.status, "overdue")

    def test_proforma_status_is_kept(self):
        Bill.objects.filter(pk=self.bill.pk).update(status="proforma")
        self.update(items=items(quantity="9", product=self.product))
        self.bill.refresh_from_db()
        self.assertEqual(self.bill.status, "proforma")
        self.assertEqual(self.bill.total_amount, Decimal("990.00"))

    def test_header_fields_kept_when_absent(self):
        Bill.objects.filter(pk=self.bill.pk).update(notes="keep me")
        self.update(terms="Net 30")
        self.bill.refresh_from_db()
        self.assertEqual(self.bill.notes, "keep me")
        self.assertEqual(self.bill.terms, "Net 30")

    def test_every_update_bumps_version(self):
        updated = self.update()
        self.assertEqual(updated.version, 2)
        self.bill.refresh_from_db()
        self.assertEqual(self.bill.version, 2)

    def test_stale_version_rejected(self):
        self.update(version=1)
        with self.assertRaises(StaleDocumentError):
            self.update(
                version=1, items=items(quantity="7", product=self.product))

        self.refresh(self.bill, self.product)
        self.assertEqual(self.bill.total_amount, Decimal("220.00"))
        self.assertEqual(self.product.quantity_on_hand, Decimal("2"))

    def test_vendor_reassignment_moves_balance(self):
        other = Vendor.objects.create(company=self.company, name="Beta Ltd")
        record_payment(self.company.pk, self.vendor.pk,
                       self.payment([(self.bill, "20.00")]))

        self.update(vendor_id=other.pk)
        self.refresh(self.bill, self.vendor, other)

        self.assertEqual(self.bill.vendor_id, other.pk)
        # 220 owed - 20 paid left the old vendor with 200, which moves over
        self.assertEqual(self.vendor.balance, Decimal("0.00"))
        self.assertEqual(other.balance, Decimal("200.00"))
        self.assertEqual(
            VendorBalanceEntry.objects.filter(reason="bill_reassigned").count(),
            2)
        receipt = Order.objects.get(pk=self.bill.stock_receipt_order_id)
        self.assertEqual(receipt.vendor_id, other.pk)

    def test_relink_to_converted_order_conflicts(self):
        order = self.make_order()
        self.make_bill(order_id=order.pk)
        with self.assertRaises(ConflictError):
            self.update(order_id=order.pk)

    def test_relink_releases_previous_order(self):
        first = self.make_order("PO-1")
        second = self.make_order("PO-2")
        self.update(order_id=first.pk)
        self.update(order_id=second.pk)
        self.refresh(first, second, self.bill)

        self.assertIsNone(first.bill_id)
        self.assertEqual(second.bill_id, self.bill.pk)
        self.assertEqual(self.bill.order_id, second.pk)

    def test_cancelled_bill_edit_has_no_side_effects(self):
        cancel_bill(self.company.pk, self.bill.pk)
        self.update(items=items(quantity="8", product=self.product))
        self.refresh(self.bill, self.vendor, self.product)

        self.assertEqual(self.bill.status, "cancelled")
        self.assertEqual(self.product.quantity_on_hand, Decimal("0"))
        self.assertEqual(self.vendor.balance, Decimal("0.00"))
        self.assertEqual(available_lots(self.company.pk, self.product.pk), [])

    def test_cancelled_bill_cannot_take_an_order(self):
        order = self.make_order()
        cancel_bill(self.company.pk, self.bill.pk)
        with self.assertRaises(ConflictError):
            self.update(order_id=order.pk)

        order.refresh_from_db()
        self.assertIsNone(order.bill_id)
        # the order is still free for a fresh conversion
        bill = self.make_bill(order_id=order.pk)
        order.refresh_from_db()
        self.assertEqual(order.bill_id, bill.pk)

    def test_unknown_bill(self):
        with self.assertRaises(NotFoundError):
            update_bill(self.company.pk, 999999,
                        {"items": items(product=self.product)})

    def test_items_required(self):
        with self.assertRaises(ValidationError):
            self.update(items=[])

    def test_vendor_cannot_be_cleared(self):
        with self.assertRaises(ValidationError):
            self.update(vendor_id=None)
