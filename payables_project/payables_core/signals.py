from django.core.exceptions import ValidationError
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .models import Bill, BillPayment, VendorBalanceEntry

""" Block bill deletion: bills are cancelled, never removed. """


# pre_delete fires for instance.delete(), queryset deletes and cascades
@receiver(pre_delete, sender=Bill)
def prevent_delete_bill(sender, instance, **kwargs):
    raise ValidationError("Bills cannot be deleted, cancel them instead.")


"""Payments and balance entries are the audit trail of vendor balances."""


@receiver(pre_delete, sender=BillPayment)
def prevent_delete_bill_payment(sender, instance, **kwargs):
    raise ValidationError("Bill payments cannot be deleted.")


@receiver(pre_delete, sender=VendorBalanceEntry)
def prevent_delete_vendor_balance_entry(sender, instance, **kwargs):
    raise ValidationError("Vendor balance entries cannot be deleted.")
