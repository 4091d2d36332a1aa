import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F

from ..exceptions import InsufficientStock, SparePartNotFound
from ..models import SparePart, stock_status  # noqa: F401

logger = logging.getLogger(__name__)


# ----------------------------
# Stock ledger
# ----------------------------
def decrement_stock(part_id, quantity: int) -> SparePart:
    """
    Take `quantity` units of a part off the shelf.
    Locks the part row; the conditional UPDATE only matches while
    enough stock is left, so stock can never go negative.
    """
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than zero.")

    with transaction.atomic():
        try:
            part = SparePart.objects.select_for_update().get(pk=part_id)
        except SparePart.DoesNotExist:
            raise SparePartNotFound(part_id)

        if part.quantity < quantity:
            raise InsufficientStock(part, part.quantity, quantity)

        updated = SparePart.objects.filter(
            pk=part.pk, quantity__gte=quantity
        ).update(quantity=F("quantity") - quantity)
        if not updated:
            # lost a race the row lock did not cover (e.g. no-lock backends)
            part.refresh_from_db(fields=["quantity"])
            raise InsufficientStock(part, part.quantity, quantity)

        part.refresh_from_db(fields=["quantity"])
        logger.debug("Stock for part %s now %s", part.pk, part.quantity)
        return part


def set_quantity(part: SparePart, quantity: int) -> SparePart:
    """Catalog-side stock correction; status follows automatically."""
    if quantity is None or int(quantity) < 0:
        raise ValidationError("Quantity cannot be negative.")
    part.quantity = int(quantity)
    part.save(update_fields=["quantity", "updated_at"])
    return part
