import re
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ..exceptions import ConflictError, NotFoundError
from ..models import (AuditLog, Bill, BillPayment, Company, OrderItem,
                      Product, Vendor, VendorBalanceEntry)
from ..services import available_lots, create_bill
from .base import PayablesTestData


class CreateBillTests(PayablesTestData, TestCase):

    def test_open_bill_totals_and_vendor_liability(self):
        bill = self.make_bill()
        self.refresh(bill, self.vendor)

        self.assertEqual(bill.total_amount, Decimal("220.00"))
        self.assertEqual(bill.paid_amount, Decimal("0.00"))
        self.assertEqual(bill.balance_due, Decimal("220.00"))
        self.assertEqual(bill.status, "opened")
        self.assertEqual(bill.version, 1)
        self.assertEqual(self.vendor.balance, Decimal("220.00"))

        entry = VendorBalanceEntry.objects.get(vendor=self.vendor)
        self.assertEqual(entry.delta, Decimal("220.00"))
        self.assertEqual(entry.reason, "bill_created")
        self.assertEqual((entry.ref_type, entry.ref_id), ("Bill", str(bill.pk)))

    def test_items_store_recalculated_values(self):
        bill = self.make_bill(quantity="3", cost_price="12.3456", tax_rate="5")
        item = bill.items.get()

        self.assertEqual(item.quantity, Decimal("3"))
        self.assertEqual(item.unit_price, Decimal("12.3456"))
        # 37.0368 * 5% = 1.85184
        self.assertEqual(item.tax_amount, Decimal("1.85"))
        self.assertEqual(item.total_price, Decimal("38.89"))
        self.assertEqual(bill.total_amount, Decimal("38.89"))

    def test_mark_as_paid_records_payment_without_net_liability(self):
        bill = self.make_bill(mark_as_paid=True, payment_method_id=self.cash.pk)
        self.refresh(bill, self.vendor)

        self.assertEqual(bill.status, "paid")
        self.assertEqual(bill.paid_amount, Decimal("220.00"))
        self.assertEqual(bill.balance_due, Decimal("0.00"))
        self.assertEqual(self.vendor.balance, Decimal("0.00"))

        payment = BillPayment.objects.get(bill=bill)
        self.assertEqual(payment.payment_amount, Decimal("220.00"))
        self.assertEqual(payment.payment_method, "Cash")

        # one zero movement keeps the event visible on the ledger
        entry = VendorBalanceEntry.objects.get(vendor=self.vendor)
        self.assertEqual(entry.delta, Decimal("0.00"))
        self.assertEqual(entry.reason, "bill_prepaid")

    def test_mark_as_paid_requires_payment_method(self):
        with self.assertRaises(ValidationError):
            self.make_bill(mark_as_paid=True)
        self.assertFalse(Bill.objects.exists())

    def test_stock_received_at_latest_cost(self):
        self.make_bill(quantity="2", cost_price="100")
        self.make_bill(quantity="5", cost_price="90.5")
        self.product.refresh_from_db()

        self.assertEqual(self.product.quantity_on_hand, Decimal("7"))
        # last cost wins, no averaging
        self.assertEqual(self.product.cost_price, Decimal("90.5000"))

    def test_receipt_order_and_lot_mirror_the_bill(self):
        bill = self.make_bill()
        bill.refresh_from_db()

        receipt = bill.stock_receipt_order
        self.assertEqual(receipt.order_no, f"BILL-RCPT-{bill.pk}")
        self.assertTrue(receipt.is_stock_receipt)
        self.assertEqual(receipt.status, "closed")
        self.assertEqual(receipt.total_amount, Decimal("220.00"))

        lot = receipt.items.get()
        self.assertEqual(lot.product_id, self.product.pk)
        self.assertEqual(lot.qty, Decimal("2"))
        self.assertEqual(lot.remaining_qty, Decimal("2"))
        self.assertEqual(lot.rate, Decimal("100.0000"))
        self.assertEqual(lot.stock_status, "in_stock")
        self.assertTrue(lot.received and lot.closed)

    def test_available_lots_oldest_first(self):
        first = self.make_bill(quantity="1")
        second = self.make_bill(quantity="4")

        lots = available_lots(self.company.pk, self.product.pk)
        self.assertEqual(
            [lot.order_id for lot in lots],
            [
                Bill.objects.get(pk=first.pk).stock_receipt_order_id,
                Bill.objects.get(pk=second.pk).stock_receipt_order_id,
            ],
        )

    def test_line_without_product_moves_no_stock(self):
        bill = create_bill(self.company.pk, {
            "vendor_id": self.vendor.pk,
            "items": [{"product_name": "Freight", "quantity": "1",
                       "cost_price": "25", "tax_rate": "0"}],
        })
        self.product.refresh_from_db()
        self.assertEqual(bill.total_amount, Decimal("25.00"))
        self.assertEqual(self.product.quantity_on_hand, Decimal("0"))

    def test_numeric_product_name_stored_as_text(self):
        bill = create_bill(self.company.pk, {
            "vendor_id": self.vendor.pk,
            "items": [{"product_name": 4711, "quantity": "1",
                       "cost_price": "5"}],
        })
        self.assertEqual(bill.items.get().product_name, "4711")

    def test_generated_bill_number_format(self):
        bill = self.make_bill()
        self.assertRegex(bill.bill_number, re.compile(r"^BILL-\d{14}-\d{4}$"))

    def test_duplicate_bill_number_conflicts(self):
        self.make_bill(bill_number="INV-77")
        with self.assertRaises(ConflictError):
            self.make_bill(bill_number="INV-77")

        self.vendor.refresh_from_db()
        self.assertEqual(Bill.objects.count(), 1)
        self.assertEqual(self.vendor.balance, Decimal("220.00"))

    def test_same_bill_number_allowed_in_other_company(self):
        other = Company.objects.create(name="Other Co")
        other_vendor = Vendor.objects.create(company=other, name="Acme")
        self.make_bill(bill_number="INV-1")
        bill = create_bill(other.pk, {
            "bill_number": "INV-1",
            "vendor_id": other_vendor.pk,
            "items": [{"quantity": "1", "cost_price": "1"}],
        })
        self.assertEqual(bill.company_id, other.pk)

    def test_items_required(self):
        with self.assertRaises(ValidationError):
            create_bill(
                self.company.pk, {"vendor_id": self.vendor.pk, "items": []})

    def test_negative_quantity_rejected(self):
        with self.assertRaises(ValidationError):
            self.make_bill(quantity="-1")
        self.assertFalse(Bill.objects.exists())

    def test_due_date_before_bill_date_rejected(self):
        with self.assertRaises(ValidationError):
            self.make_bill(
                bill_date=self.days(0).isoformat(),
                due_date=self.days(-1).isoformat())

    def test_unknown_vendor(self):
        with self.assertRaises(NotFoundError):
            create_bill(self.company.pk, {
                "vendor_id": 999999,
                "items": [{"quantity": "1", "cost_price": "1"}],
            })

    def test_product_of_other_company_rolls_everything_back(self):
        other = Company.objects.create(name="Other Co")
        foreign = Product.objects.create(company=other, name="Gadget")

        with self.assertRaises(NotFoundError):
            create_bill(self.company.pk, {
                "vendor_id": self.vendor.pk,
                "items": [{"product_id": foreign.pk, "quantity": "1",
                           "cost_price": "10"}],
            })

        self.vendor.refresh_from_db()
        foreign.refresh_from_db()
        self.assertFalse(Bill.objects.exists())
        self.assertFalse(OrderItem.objects.exists())
        self.assertEqual(self.vendor.balance, Decimal("0.00"))
        self.assertEqual(foreign.quantity_on_hand, Decimal("0"))

    def test_order_converted_once(self):
        order = self.make_order()
        bill = self.make_bill(order_id=order.pk)
        order.refresh_from_db()
        self.assertEqual(order.bill_id, bill.pk)
        self.assertEqual(bill.order_id, order.pk)

        with self.assertRaises(ConflictError):
            self.make_bill(order_id=order.pk)
        self.assertEqual(Bill.objects.count(), 1)

    def test_receipt_order_cannot_be_converted(self):
        bill = self.make_bill()
        bill.refresh_from_db()
        with self.assertRaises(NotFoundError):
            self.make_bill(order_id=bill.stock_receipt_order_id)

    def test_create_is_audited(self):
        bill = create_bill(
            self.company.pk,
            {"vendor_id": self.vendor.pk,
             "items": [{"quantity": "1", "cost_price": "1"}]},
            actor="alice",
        )
        log = AuditLog.objects.get(object_type="Bill", object_id=str(bill.pk))
        self.assertEqual(log.action, "create")
        self.assertEqual(log.actor, "alice")
        self.assertEqual(log.company_id, self.company.pk)
