from django.conf import settings
from django.db import transaction
from django.db.models import F

from ..models import Counter


def bill_id_sequence() -> str:
    return settings.BILLING.get("BILL_ID_SEQUENCE", "billId")


def next_value(name: str) -> int:
    """
    Increment the named counter and return its new value.
    Creates the counter on first use (find-and-increment, create-if-absent).

    The increment is a single UPDATE ... SET seq = seq + 1, so the row
    stays locked until the surrounding transaction ends and two callers
    can never read the same value. If the caller rolls back, the
    increment rolls back with it.
    """
    with transaction.atomic():
        Counter.objects.get_or_create(name=name)
        Counter.objects.filter(name=name).update(seq=F("seq") + 1)
        return Counter.objects.values_list("seq", flat=True).get(name=name)


def reset_sequence(name: str) -> Counter:
    """Set the counter back to zero. Meant for test/staging resets only."""
    counter, _ = Counter.objects.update_or_create(
        name=name, defaults={"seq": 0}
    )
    return counter
