from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify
from ..managers import TenantManager


# ---------- Tenant / Company ----------
class Company(models.Model):

    """Tenant / Organization"""
    name = models.CharField(max_length=200)

    slug = models.SlugField(  # A URL-friendly identifier
        max_length=80, unique=True  # no two companies can have the same slug
    )

    # Display only: amounts are never converted between currencies
    currency_code = models.CharField(max_length=10, default="USD")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "companies"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:80] or "company"
        return super().save(*args, **kwargs)


# ---------- Employee ----------
class Employee(models.Model):
    """Person inside a company who can be attached to a bill."""

    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    name = models.CharField(max_length=200)
    email = models.EmailField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "name"], name="payables_emp_company_name"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError("Employee name is required")
