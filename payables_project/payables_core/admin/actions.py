from django.contrib import admin, messages
from django.core.exceptions import ValidationError

from payables_core.exceptions import PayablesError
from payables_core.services import cancel_bill

# ---------- Admin actions ----------


@admin.action(description="Cancel selected bills")
def cancel_selected_bills(modeladmin, request, queryset):
    """
    Cancel each selected bill through the bill service, one transaction per
    bill, so one refusal (e.g. consumed stock) does not stop the batch.
    """
    actor = request.user.get_username()
    success = 0
    for bill in queryset.exclude(status="cancelled"):
        try:
            cancel_bill(bill.company_id, bill.pk, actor=actor)
            success += 1
        except (PayablesError, ValidationError) as exc:
            modeladmin.message_user(
                request, f"{bill}: {exc}", level=messages.ERROR)

    modeladmin.message_user(
        request, f"Cancelled {success} bill(s).", level=messages.SUCCESS)
