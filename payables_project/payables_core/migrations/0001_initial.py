from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=80, unique=True)),
                ("currency_code", models.CharField(default="USD", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name_plural": "companies",
            },
        ),
        migrations.CreateModel(
            name="PaymentMethod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="payables_core.company")),
            ],
            options={
                "indexes": [models.Index(fields=["company", "name"], name="payables_emp_company_name")],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sku", models.CharField(blank=True, max_length=100, null=True)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, null=True)),
                ("unit_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("cost_price", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=18)),
                ("quantity_on_hand", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("reorder_level", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="payables_core.company")),
            ],
            options={
                "indexes": [models.Index(fields=["company", "name"], name="payables_prod_company_name")],
                "constraints": [models.UniqueConstraint(fields=("company", "sku"), name="uq_company_product_sku")],
            },
        ),
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("vendor_company_name", models.CharField(blank=True, max_length=200, null=True)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("phone", models.CharField(blank=True, max_length=50, null=True)),
                ("payment_terms_days", models.IntegerField(default=30)),
                ("balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="payables_core.company")),
            ],
            options={
                "indexes": [models.Index(fields=["company", "name"], name="payables_vendor_company_name")],
            },
        ),
        migrations.CreateModel(
            name="VendorBalanceEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("delta", models.DecimalField(decimal_places=2, max_digits=15)),
                ("reason", models.CharField(choices=[("bill_created", "Bill created"), ("bill_prepaid", "Bill created as paid"), ("bill_updated", "Bill total changed"), ("bill_reassigned", "Bill moved between vendors"), ("bill_cancelled", "Bill cancelled"), ("bill_payment", "Bill payment")], max_length=30)),
                ("ref_type", models.CharField(max_length=50)),
                ("ref_id", models.CharField(max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="payables_core.company")),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="balance_entries", to="payables_core.vendor")),
            ],
            options={
                "verbose_name_plural": "vendor balance entries",
                "indexes": [
                    models.Index(fields=["company", "vendor"], name="payables_vbe_company_vendor"),
                    models.Index(fields=["ref_type", "ref_id"], name="payables_vbe_ref"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("actor", models.CharField(blank=True, default="", max_length=150)),
                ("action", models.CharField(max_length=50)),
                ("object_type", models.CharField(max_length=100)),
                ("object_id", models.CharField(max_length=100)),
                ("changes", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="payables_core.company")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "created_at"], name="payables_audit_company_time"),
                    models.Index(fields=["object_type", "object_id"], name="payables_audit_object"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_no", models.CharField(max_length=100)),
                ("order_date", models.DateField()),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("status", models.CharField(choices=[("open", "Open"), ("closed", "Closed")], default="open", max_length=10)),
                ("is_stock_receipt", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="payables_core.company")),
                ("vendor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="payables_core.vendor")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "vendor"], name="payables_order_company_vendor"),
                    models.Index(fields=["company", "is_stock_receipt"], name="payables_order_receipt"),
                ],
                "constraints": [models.UniqueConstraint(fields=("company", "order_no"), name="uq_company_order_no")],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("sku", models.CharField(blank=True, max_length=100, null=True)),
                ("description", models.TextField(blank=True, null=True)),
                ("qty", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("rate", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=18)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("received", models.BooleanField(default=False)),
                ("closed", models.BooleanField(default=False)),
                ("remaining_qty", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=14)),
                ("stock_status", models.CharField(choices=[("not_tracked", "Not tracked"), ("in_stock", "In stock"), ("out_of_stock", "Out of stock")], default="not_tracked", max_length=15)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="payables_core.order")),
                ("product", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="payables_core.product")),
            ],
            options={
                "indexes": [models.Index(fields=["product", "stock_status", "created_at"], name="payables_lot_product_fifo")],
                "constraints": [models.CheckConstraint(condition=models.Q(("qty__gte", 0), ("remaining_qty__gte", 0)), name="oi_non_negative_qty")],
            },
        ),
        migrations.CreateModel(
            name="Bill",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bill_number", models.CharField(max_length=64)),
                ("bill_date", models.DateField(blank=True, null=True)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("terms", models.CharField(blank=True, default="", max_length=100)),
                ("notes", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=[("opened", "Opened"), ("partially_paid", "Partially paid"), ("paid", "Paid"), ("overdue", "Overdue"), ("cancelled", "Cancelled"), ("proforma", "Proforma")], default="opened", max_length=20)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("paid_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("balance_due", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="payables_core.company")),
                ("employee", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="payables_core.employee")),
                ("order", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="payables_core.order")),
                ("payment_method", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, to="payables_core.paymentmethod")),
                ("stock_receipt_order", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="receipt_for_bill", to="payables_core.order")),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="bills", to="payables_core.vendor")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "vendor"], name="payables_bill_company_vendor"),
                    models.Index(fields=["company", "status"], name="payables_bill_company_status"),
                    models.Index(fields=["company", "due_date"], name="payables_bill_company_due"),
                ],
                "constraints": [models.UniqueConstraint(fields=("company", "bill_number"), name="uq_bill_company_number")],
            },
        ),
        migrations.AddField(
            model_name="order",
            name="bill",
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="converted_orders", to="payables_core.bill"),
        ),
        migrations.CreateModel(
            name="BillItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_name", models.CharField(blank=True, default="", max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("quantity", models.DecimalField(decimal_places=4, default=Decimal("1"), max_digits=14)),
                ("unit_price", models.DecimalField(decimal_places=4, default=Decimal("0.0000"), max_digits=18)),
                ("tax_rate", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=7)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("total_price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("bill", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="payables_core.bill")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="payables_core.company")),
                ("product", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, to="payables_core.product")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "bill"], name="payables_bitem_company_bill"),
                    models.Index(fields=["company", "product"], name="payables_bitem_company_prod"),
                ],
                "constraints": [models.CheckConstraint(condition=models.Q(("quantity__gte", 0), ("unit_price__gte", 0), ("tax_rate__gte", 0)), name="bi_non_negative_amounts")],
            },
        ),
        migrations.CreateModel(
            name="BillPayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_amount", models.DecimalField(decimal_places=2, max_digits=15)),
                ("payment_date", models.DateField()),
                ("payment_method", models.CharField(max_length=50)),
                ("deposit_to", models.CharField(blank=True, default="", max_length=100)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("bill", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="payables_core.bill")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="payables_core.company")),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="bill_payments", to="payables_core.vendor")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "bill"], name="payables_bpay_company_bill"),
                    models.Index(fields=["company", "vendor"], name="payables_bpay_company_vendor"),
                ],
                "constraints": [models.CheckConstraint(condition=models.Q(("payment_amount__gt", 0)), name="bp_positive_amount")],
            },
        ),
    ]
