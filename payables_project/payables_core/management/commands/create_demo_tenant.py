import datetime
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from payables_core.models import (Company, Employee, Order, PaymentMethod,
                                  Product, Vendor)
from payables_core.services import create_bill


class Command(BaseCommand):
    help = (
        "Create a demo tenant (company) with vendors, products and an "
        "opening bill for testing."
    )

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--company-name",
            default="Demo Company",
            help="Name of the demo company to create.",
        )
        parser.add_argument(
            "--vendor-name",
            default="Acme Supplies",
            help="Name of the demo vendor.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        company_name = options["company_name"]
        today = timezone.localdate()

        # Generate unique slug for company
        def unique_slug_for_company(name, max_tries=100):
            base = slugify(name) or "company"
            slug = base
            i = 1
            # If plain slug is taken, append -1, -2, etc.
            while Company.objects.filter(slug=slug).exists():
                slug = f"{base}-{i}"
                i += 1
                if i > max_tries:
                    raise RuntimeError("Couldn't generate unique slug")
            return slug

        # 1. Company and the people in it
        company, created = Company.objects.get_or_create(
            name=company_name,
            defaults={"slug": unique_slug_for_company(company_name)},
        )
        self.stdout.write(self.style.SUCCESS(f"Created company: {company}"))
        if not created and company.vendor_set.exists():
            self.stdout.write(self.style.WARNING(
                "Company already has data, nothing else to do."))
            return

        employee = Employee.objects.create(
            company=company, name="Demo Buyer",
            email="buyer@example.com")

        # 2. Shared payment methods
        methods = {}
        for name in ("Cash", "Bank Transfer", "Cheque"):
            methods[name], _ = PaymentMethod.objects.get_or_create(name=name)
        self.stdout.write(self.style.SUCCESS("Created payment methods"))

        # 3. Vendor and catalog
        vendor = Vendor.objects.create(
            company=company,
            name=options["vendor_name"],
            email="billing@example.com",
            payment_terms_days=30,
        )
        paper = Product.objects.create(
            company=company, sku="PAPER-A4", name="A4 paper (box)",
            unit_price=Decimal("12.00"))
        toner = Product.objects.create(
            company=company, sku="TONER-BK", name="Black toner",
            unit_price=Decimal("80.00"))
        self.stdout.write(self.style.SUCCESS(
            f"Created vendor {vendor} and products {paper}, {toner}"))

        # 4. Open purchase order, ready to be converted into a bill
        order = Order.objects.create(
            company=company,
            vendor=vendor,
            order_no=f"PO-{today:%Y%m%d}-001",
            order_date=today,
            total_amount=Decimal("500.00"),
        )
        self.stdout.write(self.style.SUCCESS(f"Created {order}"))

        # 5. One bill through the bill service, so stock and balance move
        bill = create_bill(
            company.pk,
            {
                "vendor_id": vendor.pk,
                "employee_id": employee.pk,
                "bill_date": today.isoformat(),
                "due_date": (
                    today + datetime.timedelta(days=vendor.payment_terms_days)
                ).isoformat(),
                "payment_method_id": methods["Bank Transfer"].pk,
                "items": [
                    {"product_id": paper.pk, "quantity": "10",
                     "cost_price": "9.50", "tax_rate": "10"},
                    {"product_id": toner.pk, "quantity": "2",
                     "cost_price": "61.25", "tax_rate": "10"},
                ],
            },
            actor="demo-seed",
        )
        self.stdout.write(self.style.SUCCESS(
            f"Created bill {bill.bill_number} for {bill.total_amount}"))
        self.stdout.write(self.style.SUCCESS("Demo tenant setup complete!"))
