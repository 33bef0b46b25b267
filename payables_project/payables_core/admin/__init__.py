from .actions import cancel_selected_bills
from .auditlog import AuditLogAdmin
from .bill import BillAdmin, BillPaymentAdmin
from .company import CompanyAdmin, EmployeeAdmin, PaymentMethodAdmin
from .inlines import BillItemInline, BillPaymentInline, LotInline
from .mixins import TenantAdminMixin
from .product import OrderAdmin, ProductAdmin
from .vendor import VendorAdmin, VendorBalanceEntryAdmin
