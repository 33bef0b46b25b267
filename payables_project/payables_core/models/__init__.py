from .auditlog import AuditLog
from .bill import Bill, BillItem, BillPayment
from .company import Company, Employee
from .order import Order, OrderItem
from .payment_method import PaymentMethod
from .product import Product
from .vendor import Vendor, VendorBalanceEntry
