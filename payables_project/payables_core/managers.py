from django.db import models

# -----------------------------------------
# Enforce tenant scoping across all models
# that belong to a company
# -----------------------------------------
class TenantQuerySet(models.QuerySet):
    def for_company(self, company):
        # accepts a Company instance or its primary key
        return self.filter(company=company)

    def active(self, company):
        return self.filter(
                            company=company,  # enforce tenant scoping
                            is_active=True    # only fetch active records
                        )
    # Enables query:
    # Vendor.objects.active(company_id)


# Attach TenantQuerySet to .objects
class TenantManager(models.Manager):

    def get_queryset(self):  # every model gets TenantQuerySet
        return TenantQuerySet(self.model, using=self._db)

    def for_company(self, company):
        return self.get_queryset().for_company(company)

    def active(self, company):
        return self.get_queryset().active(company)


# ---------------------------------------------
# Stock receipt lots (OrderItem rows) consumed
# oldest-first by the invoicing side
# ---------------------------------------------
class LotQuerySet(models.QuerySet):
    def for_company(self, company):
        # lots carry no company column, the owning order does
        return self.filter(order__company=company)

    def receipt_lots(self):
        return self.filter(order__is_stock_receipt=True)

    def in_stock(self):
        return self.filter(stock_status="in_stock", remaining_qty__gt=0)

    def fifo(self, company, product):
        # Oldest lot first; id breaks ties for rows created in the same instant
        return (
            self.for_company(company)
            .receipt_lots()
            .in_stock()
            .filter(product=product)
            .order_by("created_at", "id")
        )


class LotManager(models.Manager):
    def get_queryset(self):
        return LotQuerySet(self.model, using=self._db)

    def fifo(self, company, product):
        return self.get_queryset().fifo(company, product)
