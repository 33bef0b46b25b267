from django.db import models


class PaymentMethod(models.Model):
    """Shared lookup table (cash, cheque, bank transfer, ...)."""

    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
