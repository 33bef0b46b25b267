from django.urls import path

from . import views

# Paths follow the routes the front end already calls
urlpatterns = [
    path("createBill/<int:company_id>/", views.create_bill_view,
         name="create-bill"),
    path("getAllBills/<int:company_id>/", views.all_bills_view,
         name="all-bills"),
    path("getBillItems/<int:company_id>/<int:bill_id>/",
         views.bill_items_view, name="bill-items"),
    path("updateBill/<int:company_id>/<int:bill_id>/",
         views.update_bill_view, name="update-bill"),
    path("cancelBill/<int:company_id>/<int:bill_id>/",
         views.cancel_bill_view, name="cancel-bill"),
    path("getBillsByVendor/<int:company_id>/<int:vendor_id>/",
         views.bills_by_vendor_view, name="bills-by-vendor"),
    path("recordBillPayment/<int:company_id>/<int:vendor_id>/",
         views.record_payment_view, name="record-bill-payment"),
    path("availableLots/<int:company_id>/<int:product_id>/",
         views.available_lots_view, name="available-lots"),
    path("vendorLedger/<int:company_id>/<int:vendor_id>/",
         views.vendor_ledger_view, name="vendor-ledger"),
]
