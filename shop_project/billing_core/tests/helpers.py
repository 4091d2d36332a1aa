import datetime
from decimal import Decimal

from django.utils import timezone

from ..models import Bill, Customer, SparePart
from ..services import build_bill_request, create_bill


class BillingFixtures:
    """setUp helpers shared by the workflow tests."""

    def make_customer(self, name="Asha", phone="9000000001"):
        return Customer.objects.create(name=name, phone=phone)

    def make_part(self, category="Display", quantity=10, price="100.00", **extra):
        return SparePart.objects.create(
            category=category,
            device_model=extra.pop("device_model", ["Galaxy A52"]),
            brand=extra.pop("brand", ["Samsung"]),
            quantity=quantity,
            price=Decimal(price),
            **extra,
        )

    def make_bill(self, customer, lines, payments=(), pending_bills=(), discount=0):
        """
        Create a bill through the workflow. `lines` is a list of
        (part, quantity, unit_price) tuples.
        """
        request = build_bill_request(
            customer=customer.pk,
            items=[
                {"spare_part": part.pk, "quantity": qty, "unit_price": price}
                for part, qty, price in lines
            ],
            payments=list(payments),
            pending_bills_to_clear=[b.pk for b in pending_bills],
            discount_amount=discount,
        )
        return create_bill(request)

    def make_old_bill(self, customer, part, amount, days_ago):
        """An unpaid bill for `amount`, backdated so settlement order is explicit."""
        bill = self.make_bill(customer, [(part, 1, amount)]).bill
        Bill.objects.filter(pk=bill.pk).update(
            created_at=timezone.now() - datetime.timedelta(days=days_ago)
        )
        bill.refresh_from_db()
        return bill
