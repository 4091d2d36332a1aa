from django.db import models
from django.db.models import Q


# -----------------------------------------
# Read-side helpers for bills
# -----------------------------------------
class BillQuerySet(models.QuerySet):
    def for_customer(self, customer):
        return self.filter(customer=customer)

    # Bills that still owe money
    def outstanding(self):
        return self.filter(pending_amount__gt=0)

    # Settlement order: oldest debt first, pk breaks ties
    def oldest_first(self):
        return self.order_by("created_at", "pk")

    def search(self, term):
        # matches the customer snapshot, not the live customer record
        return self.filter(
            Q(customer_name__icontains=term) | Q(customer_phone__icontains=term)
        )

    # Everything the bill detail payload expands
    def with_details(self):
        return self.select_related("customer").prefetch_related(
            "items__spare_part", "payments"
        )


class BillManager(models.Manager):
    def get_queryset(self):
        return BillQuerySet(self.model, using=self._db)

    def for_customer(self, customer):
        return self.get_queryset().for_customer(customer)

    def outstanding(self):
        return self.get_queryset().outstanding()

    def with_details(self):
        return self.get_queryset().with_details()
