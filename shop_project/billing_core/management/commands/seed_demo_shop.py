from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from billing_core.models import SparePart
from billing_core.services import build_bill_request, create_bill

User = get_user_model()

# (category, device models, brands, quantity, price, box)
DEMO_PARTS = [
    ("Display", ["Galaxy A52"], ["Samsung"], 8, Decimal("2400.00"), "A1"),
    ("Battery", ["iPhone 11", "iPhone 11 Pro"], ["Apple"], 12, Decimal("1500.00"), "B3"),
    ("Charging Port", ["Redmi Note 10"], ["Xiaomi"], 20, Decimal("350.00"), "C2"),
    ("Back Glass", ["Pixel 6"], ["Google"], 1, Decimal("900.00"), "D4"),
]


class Command(BaseCommand):
    help = "Create a staff user, a spare part catalog and a few demo bills."

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--username", default="counter", help="Username for the demo staff user."
        )
        parser.add_argument(
            "--password", default="counter123", help="Password for the demo staff user."
        )

    @transaction.atomic
    def handle(self, *args, **options):
        # 1. Staff user who can open the admin and reset the counter
        user, created = User.objects.get_or_create(
            username=options["username"], defaults={"is_staff": True}
        )
        if created:
            user.set_password(options["password"])
            user.save()
        self.stdout.write(f"User {user.username} ({'created' if created else 'exists'})")

        # 2. Catalog
        parts = []
        for category, device_models, brands, quantity, price, box in DEMO_PARTS:
            part, _ = SparePart.objects.get_or_create(
                category=category,
                box_number=box,
                defaults={
                    "device_model": device_models,
                    "brand": brands,
                    "quantity": quantity,
                    "price": price,
                },
            )
            parts.append(part)
        self.stdout.write(f"{len(parts)} spare parts ready")

        # 3. An unpaid bill, then a visit that pays part of it off
        first = create_bill(
            build_bill_request(
                customer_name="Ravi Kumar",
                customer_phone="9876543210",
                items=[{"spare_part": parts[2].pk, "quantity": 1}],
            ),
            user=user,
        )
        second = create_bill(
            build_bill_request(
                customer=first.bill.customer_id,
                items=[{"spare_part": parts[1].pk, "quantity": 1}],
                payments=[{"amount": "1700", "source": "UPI"}],
                pending_bills_to_clear=[first.bill.pk],
            ),
            user=user,
        )

        for result in (first, second):
            bill = result.bill
            self.stdout.write(
                f"Bill {bill.bill_id}: total {bill.total_amount}, "
                f"pending {bill.pending_amount}, {bill.payment_status}"
            )
        self.stdout.write(self.style.SUCCESS("Demo shop seeded successfully!"))
