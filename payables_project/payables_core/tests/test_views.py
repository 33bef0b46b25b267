import json
from decimal import Decimal

import pytest
from django.urls import reverse

from ..models import Bill, Company, PaymentMethod, Product, Vendor


@pytest.fixture
def setup_data(db):
    company = Company.objects.create(name="Company A")
    vendor = Vendor.objects.create(company=company, name="Acme")
    product = Product.objects.create(company=company, sku="W-1", name="Widget")
    method = PaymentMethod.objects.create(name="Cash")
    return {"company": company, "vendor": vendor, "product": product,
            "method": method}


def post_json(client, url, payload, method="post"):
    return getattr(client, method)(
        url, data=json.dumps(payload), content_type="application/json")


def bill_payload(data, **extra):
    payload = {
        "vendor_id": data["vendor"].pk,
        "items": [{"product_id": data["product"].pk, "quantity": 2,
                   "cost_price": 100, "tax_rate": 10}],
    }
    payload.update(extra)
    return payload


def test_create_then_list_and_items(client, setup_data):
    company = setup_data["company"]
    response = post_json(
        client, reverse("create-bill", args=[company.pk]),
        bill_payload(setup_data))
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Bill created successfully"
    bill_id = body["billId"]

    response = client.get(reverse("all-bills", args=[company.pk]))
    assert response.status_code == 200
    rows = response.json()
    assert [r["id"] for r in rows] == [bill_id]
    assert rows[0]["vendor_name"] == "Acme"
    assert Decimal(rows[0]["total_amount"]) == Decimal("220.00")

    response = client.get(reverse("bill-items", args=[company.pk, bill_id]))
    items = response.json()
    assert len(items) == 1
    assert Decimal(items[0]["total_price"]) == Decimal("220.00")


def test_update_returns_new_version(client, setup_data):
    company = setup_data["company"]
    bill_id = post_json(
        client, reverse("create-bill", args=[company.pk]),
        bill_payload(setup_data)).json()["billId"]

    response = post_json(
        client, reverse("update-bill", args=[company.pk, bill_id]),
        bill_payload(setup_data, version=1), method="put")
    assert response.status_code == 200
    assert response.json()["version"] == 2

    # same stale version again
    response = post_json(
        client, reverse("update-bill", args=[company.pk, bill_id]),
        bill_payload(setup_data, version=1), method="put")
    assert response.status_code == 409


def test_payment_and_vendor_views(client, setup_data):
    company, vendor = setup_data["company"], setup_data["vendor"]
    bill_id = post_json(
        client, reverse("create-bill", args=[company.pk]),
        bill_payload(setup_data)).json()["billId"]

    response = post_json(
        client, reverse("record-bill-payment", args=[company.pk, vendor.pk]),
        {
            "payment_amount": "120",
            "payment_date": "2026-01-15",
            "payment_method": "Cash",
            "bill_payments": [{"bill_id": bill_id, "payment_amount": "120"}],
        })
    assert response.status_code == 200
    assert response.json()["message"] == "Bill Payment recorded successfully"
    assert len(response.json()["payment_ids"]) == 1

    bills = client.get(
        reverse("bills-by-vendor", args=[company.pk, vendor.pk])).json()
    assert bills[0]["status"] == "partially_paid"
    assert len(bills[0]["items"]) == 1

    ledger = client.get(
        reverse("vendor-ledger", args=[company.pk, vendor.pk])).json()
    assert [e["reason"] for e in ledger] == ["bill_created", "bill_payment"]
    assert sum(Decimal(e["delta"]) for e in ledger) == Decimal("100.00")


def test_lots_and_cancel_views(client, setup_data):
    company, product = setup_data["company"], setup_data["product"]
    bill_id = post_json(
        client, reverse("create-bill", args=[company.pk]),
        bill_payload(setup_data)).json()["billId"]

    lots = client.get(
        reverse("available-lots", args=[company.pk, product.pk])).json()
    assert len(lots) == 1
    assert Decimal(lots[0]["remaining_qty"]) == Decimal("2")

    response = client.post(reverse("cancel-bill", args=[company.pk, bill_id]))
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = client.post(reverse("cancel-bill", args=[company.pk, bill_id]))
    assert response.status_code == 409


@pytest.mark.parametrize(
    "payload,status",
    [
        ({"items": [{"quantity": 1, "cost_price": 1}]}, 400),
        ({"vendor_id": 999999,
          "items": [{"quantity": 1, "cost_price": 1}]}, 404),
    ],
)
def test_create_errors(client, setup_data, payload, status):
    company = setup_data["company"]
    response = post_json(
        client, reverse("create-bill", args=[company.pk]), payload)
    assert response.status_code == status
    assert response.json()["ok"] is False
    assert not Bill.objects.exists()


def test_invalid_json_is_bad_request(client, setup_data):
    response = client.post(
        reverse("create-bill", args=[setup_data["company"].pk]),
        data="{not json", content_type="application/json")
    assert response.status_code == 400


def test_duplicate_bill_number_conflict(client, setup_data):
    url = reverse("create-bill", args=[setup_data["company"].pk])
    assert post_json(
        client, url, bill_payload(setup_data, bill_number="X-1")
    ).status_code == 201
    response = post_json(
        client, url, bill_payload(setup_data, bill_number="X-1"))
    assert response.status_code == 409


def test_payment_sum_mismatch_rejected(client, setup_data):
    company, vendor = setup_data["company"], setup_data["vendor"]
    bill_id = post_json(
        client, reverse("create-bill", args=[company.pk]),
        bill_payload(setup_data)).json()["billId"]
    response = post_json(
        client, reverse("record-bill-payment", args=[company.pk, vendor.pk]),
        {
            "payment_amount": "100",
            "payment_date": "2026-01-15",
            "payment_method": "Cash",
            "bill_payments": [{"bill_id": bill_id, "payment_amount": "50"}],
        })
    assert response.status_code == 400
    assert "does not match" in response.json()["error"]


def test_unknown_bill_items_not_found(client, setup_data):
    response = client.get(
        reverse("bill-items", args=[setup_data["company"].pk, 999999]))
    assert response.status_code == 404


def test_wrong_method_not_allowed(client, setup_data):
    response = client.get(
        reverse("create-bill", args=[setup_data["company"].pk]))
    assert response.status_code == 405
