from django.core.exceptions import ValidationError

from ..exceptions import CustomerNotFound
from ..models import Customer


def resolve_customer(*, customer_id=None, name=None, phone=None, address=None) -> Customer:
    """
    Find the customer a bill is for.
    An id must point at an existing customer; otherwise name + phone
    are looked up and the customer is registered on first visit.
    """
    if customer_id is not None:
        try:
            return Customer.objects.get(pk=customer_id)
        except Customer.DoesNotExist:
            raise CustomerNotFound(customer_id)

    name = (name or "").strip()
    phone = (phone or "").strip()
    if not name or not phone:
        raise ValidationError("Customer name and phone are required.")

    customer, _ = Customer.objects.get_or_create(
        name=name, phone=phone, defaults={"address": address or None}
    )
    return customer
