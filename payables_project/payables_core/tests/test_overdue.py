from decimal import Decimal

import pytest
from django.test import TestCase

from ..exceptions import NotFoundError
from ..models import AuditLog, Bill, Company, Vendor
from ..services import get_bills_by_vendor
from ..tasks import sweep_overdue_bills
from .base import PayablesTestData


class OverdueOnReadTests(PayablesTestData, TestCase):

    def make_past_due(self, **extra):
        return self.make_bill(
            bill_date=self.days(-30).isoformat(),
            due_date=self.days(-1).isoformat(),
            **extra)

    def test_read_flips_past_due_bill_and_persists(self):
        bill = self.make_past_due()
        self.assertEqual(bill.status, "opened")

        bills = get_bills_by_vendor(self.company.pk, self.vendor.pk)
        self.assertEqual([b.status for b in bills], ["overdue"])

        bill.refresh_from_db()
        self.assertEqual(bill.status, "overdue")
        self.assertEqual(bill.version, 2)
        self.assertTrue(
            AuditLog.objects.filter(
                action="mark_overdue", object_id=str(bill.pk)).exists())

    def test_read_returns_items(self):
        self.make_bill()
        bills = get_bills_by_vendor(self.company.pk, self.vendor.pk)
        self.assertEqual(len(bills[0].items.all()), 1)

    def test_due_today_not_overdue(self):
        bill = self.make_bill(
            bill_date=self.days(-3).isoformat(),
            due_date=self.days(0).isoformat())
        get_bills_by_vendor(self.company.pk, self.vendor.pk)
        bill.refresh_from_db()
        self.assertEqual(bill.status, "opened")

    def test_bill_without_due_date_never_overdue(self):
        bill = self.make_bill()
        get_bills_by_vendor(
            self.company.pk, self.vendor.pk, today=self.days(365))
        bill.refresh_from_db()
        self.assertEqual(bill.status, "opened")

    def test_paid_proforma_and_cancelled_untouched(self):
        paid = self.make_past_due(
            mark_as_paid=True, payment_method_id=self.cash.pk)
        proforma = self.make_past_due()
        cancelled = self.make_past_due()
        Bill.objects.filter(pk=proforma.pk).update(status="proforma")
        Bill.objects.filter(pk=cancelled.pk).update(status="cancelled")

        get_bills_by_vendor(self.company.pk, self.vendor.pk)
        self.refresh(paid, proforma, cancelled)
        self.assertEqual(
            [paid.status, proforma.status, cancelled.status],
            ["paid", "proforma", "cancelled"])

    def test_fully_paid_balance_not_overdue(self):
        bill = self.make_past_due()
        Bill.objects.filter(pk=bill.pk).update(
            paid_amount=Decimal("220.00"), balance_due=Decimal("0.00"))
        get_bills_by_vendor(self.company.pk, self.vendor.pk)
        bill.refresh_from_db()
        self.assertEqual(bill.status, "opened")

    def test_unknown_vendor(self):
        with self.assertRaises(NotFoundError):
            get_bills_by_vendor(self.company.pk, 999999)

    def test_vendor_without_bills(self):
        other = Vendor.objects.create(company=self.company, name="Beta Ltd")
        self.assertEqual(get_bills_by_vendor(self.company.pk, other.pk), [])


class OverdueSweepTests(PayablesTestData, TestCase):

    def test_sweep_flips_once(self):
        bill = self.make_bill(
            bill_date=self.days(-30).isoformat(),
            due_date=self.days(-2).isoformat())
        self.make_bill()  # no due date

        self.assertEqual(sweep_overdue_bills(), 1)
        self.assertEqual(sweep_overdue_bills(), 0)

        bill.refresh_from_db()
        self.assertEqual(bill.status, "overdue")
        log = AuditLog.objects.get(action="mark_overdue")
        self.assertEqual(log.actor, "overdue-sweep")

    def test_sweep_limited_to_company(self):
        self.make_bill(
            bill_date=self.days(-30).isoformat(),
            due_date=self.days(-2).isoformat())
        other = Company.objects.create(name="Other Co")

        self.assertEqual(sweep_overdue_bills(company_id=other.pk), 0)
        self.assertEqual(sweep_overdue_bills(company_id=self.company.pk), 1)


@pytest.mark.django_db
def test_sweep_with_no_companies_does_nothing():
    assert sweep_overdue_bills() == 0
