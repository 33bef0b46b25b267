from .bills import (cancel_bill, create_bill, get_all_bills, get_bill_items,
                    get_bills_by_vendor, mark_overdue, update_bill)
from .calculator import calculate_line, calculate_lines
from .payment import record_payment
from .stock_receipt import (available_lots, create_receipt_for,
                            replace_receipt_for)
from .vendor_balance import adjust_vendor_balance, vendor_ledger
