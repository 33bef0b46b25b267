import logging

from celery import shared_task
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def sweep_overdue_bills(company_id=None):
    """Flip past-due bills to overdue, one transaction per company."""
    # import lazily to avoid circular imports at module import time
    from .models import Bill, Company
    from .services.bills import mark_overdue
    from .services.status import OVERDUE_CANDIDATES

    today = timezone.localdate()
    companies = Company.objects.all()
    if company_id is not None:
        companies = companies.filter(pk=company_id)

    flipped = 0
    for company in companies.order_by("pk"):
        with transaction.atomic():
            bills = (
                Bill.objects.for_company(company)
                .select_for_update()
                .filter(
                    status__in=OVERDUE_CANDIDATES,
                    due_date__lt=today,
                    balance_due__gt=0,
                )
            )
            flipped += len(mark_overdue(list(bills), today, actor="overdue-sweep"))

    logger.info("overdue sweep marked %d bill(s)", flipped)
    return flipped
