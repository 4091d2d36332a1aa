from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from ..allocation import (DIRECT, PAYMENT_KIND_CHOICES, PAYMENT_SOURCE_CHOICES,
                          PAYMENT_STATUS_CHOICES, SETTLED_TOLERANCE,
                          SETTLEMENT_OUTFLOW, UNPAID, ZERO,
                          derive_payment_status, pending_for)
from ..managers import BillManager
from .customer import Customer
from .spare_part import SparePart

# ---------- Bills / BillItems / Payments ----------

# Header represents one sale at the counter


class Bill(models.Model):
    # Human-facing id from the "billId" counter ("1", "2", ...)
    bill_id = models.CharField(max_length=32, unique=True)

    # prevent deleting a customer who has bills
    customer = models.ForeignKey(
        Customer, on_delete=models.PROTECT, related_name="bills"
    )
    # Snapshot taken at creation, never resynced with Customer
    customer_name = models.CharField(max_length=200)
    customer_phone = models.CharField(max_length=32)

    # Post-discount amount owed
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    discount_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    # Cumulative money received for this bill
    amount_paid = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    # Always total_amount - amount_paid, never negative
    pending_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    # Derived from pending_amount; see derive_payment_status()
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=UNPAID
    )

    notes = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BillManager()

    class Meta:
        indexes = [
            models.Index(fields=["customer", "pending_amount"], name="bill_customer_pending_idx"),
            models.Index(fields=["payment_status"], name="bill_payment_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_paid__gte=0)
                & models.Q(pending_amount__gte=0)
                & models.Q(discount_amount__gte=0),
                name="bill_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"Bill #{self.bill_id}"

    def clean(self):
        # Stored balances must agree with each other
        expected = pending_for(self.total_amount, self.amount_paid)
        _, expected_status = derive_payment_status(expected, self.amount_paid)
        if abs(self.pending_amount - expected) > SETTLED_TOLERANCE:
            raise ValidationError(
                f"Pending amount {self.pending_amount} does not match "
                f"total {self.total_amount} minus paid {self.amount_paid}."
            )
        if self.payment_status != expected_status:
            raise ValidationError(
                f"Payment status must be '{expected_status}', "
                f"not '{self.payment_status}'."
            )

    def save(self, *args, **kwargs):
        self.full_clean()  # will trigger clean()
        return super().save(*args, **kwargs)

    """ Prevent deleting bills that already have payments applied """

    def delete(self, *args, **kwargs):
        if self.payments.exists():
            raise ValidationError(
                "Cannot delete a bill with recorded payments.")
        return super().delete(*args, **kwargs)

    def ledger_paid_total(self) -> Decimal:
        """Money that actually landed on this bill, outflow rows excluded."""
        return sum(
            (p.amount for p in self.payments.all() if p.kind != SETTLEMENT_OUTFLOW),
            ZERO,
        )


class BillItem(models.Model):
    # Detail line: one spare part sold on the bill
    bill = models.ForeignKey(
        Bill, on_delete=models.CASCADE, related_name="items")
    # Prevent deleting a part which has been billed
    spare_part = models.ForeignKey(
        SparePart, on_delete=models.PROTECT, related_name="bill_items"
    )

    # Catalog snapshot at sale time
    name = models.CharField(max_length=200)
    device_model = models.JSONField(default=list, blank=True)
    brand = models.JSONField(default=list, blank=True)
    box_number = models.CharField(max_length=50, null=True, blank=True)

    # quantity × unit_price = subtotal
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ("id",)
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0) & models.Q(unit_price__gte=0),
                name="billitem_positive_quantity",
            ),
        ]

    def __str__(self):
        return f"{self.name} x{self.quantity}"

    def save(self, *args, **kwargs):
        # Lines are frozen once written
        if self.pk:
            raise ValidationError("Bill items cannot be changed once saved.")
        self.subtotal = self.quantity * self.unit_price
        self.full_clean()
        return super().save(*args, **kwargs)


class Payment(models.Model):
    # One money movement on a bill; rows are only ever appended
    bill = models.ForeignKey(
        Bill, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    # direct / settlement_outflow / settlement_inflow
    kind = models.CharField(
        max_length=20, choices=PAYMENT_KIND_CHOICES, default=DIRECT
    )
    # Human-readable label (Cash, UPI, ... or a settlement label)
    source = models.CharField(max_length=40, choices=PAYMENT_SOURCE_CHOICES)
    # Set server-side when the payment is applied
    date = models.DateTimeField(default=timezone.now)
    # billIds this row cross-references for settlements
    source_bill_ids = models.JSONField(default=list, blank=True)

    class Meta:
        # insertion order is chronological order
        ordering = ("id",)
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_positive_amount",
            ),
        ]

    def __str__(self):
        return f"{self.source} {self.amount} on {self.bill}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Payments are append-only.")
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Payment amount must be greater than zero.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Payments are append-only.")
