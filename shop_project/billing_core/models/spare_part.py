from decimal import Decimal
from django.db import models

IN_STOCK = "in-stock"
OUT_OF_STOCK = "out-of-stock"


def stock_status(quantity) -> str:
    """Stock status is never stored, it follows the quantity."""
    return IN_STOCK if quantity > 0 else OUT_OF_STOCK


# ---------- Spare part catalog ----------
class SparePart(models.Model):
    # Primary identifier shown on the counter, e.g. "Display", "Battery"
    category = models.CharField(max_length=120)
    # A part can fit several devices / brands
    device_model = models.JSONField(default=list, blank=True)
    brand = models.JSONField(default=list, blank=True)

    # Units on hand, only the stock ledger decrements it
    quantity = models.PositiveIntegerField(default=0)
    # Catalog price; bills freeze their own unit price
    price = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    image_url = models.URLField(max_length=500, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    # Shelf / box where the part is kept
    box_number = models.CharField(max_length=50, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["category"], name="sparepart_category_idx")]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="sparepart_non_negative_quantity",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="sparepart_non_negative_price",
            ),
        ]

    def __str__(self):
        models_label = ", ".join(self.device_model or [])
        return f"{self.category} ({models_label})" if models_label else self.category

    @property
    def status(self):
        return stock_status(self.quantity)
