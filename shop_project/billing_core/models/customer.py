from django.core.exceptions import ValidationError
from django.db import models


# ---------- Customer ----------
# Walk-in or repeat customer who receives bills
class Customer(models.Model):
    name = models.CharField(max_length=200)
    # Required; the counter looks customers up by name + phone
    phone = models.CharField(max_length=32)
    address = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["phone"], name="customer_phone_idx"),
            models.Index(fields=["name"], name="customer_name_idx"),
        ]
        # Same person cannot be registered twice
        constraints = [
            models.UniqueConstraint(
                fields=["name", "phone"], name="uq_customer_name_phone"
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.phone})"

    def clean(self):
        self.name = (self.name or "").strip()
        self.phone = (self.phone or "").strip()
        if not self.name:
            raise ValidationError("Customer name is required.")
        if not self.phone:
            raise ValidationError("Customer phone is required.")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
