import datetime

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.paginator import Paginator
from django.utils import timezone

from ..allocation import PAYMENT_STATUS_CHOICES
from ..models import Bill


def _parse_date(value, name):
    try:
        return datetime.date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Malformed {name}: {value!r}")


def _positive_int(value, default, name):
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Malformed {name}: {value!r}")
    if number < 1:
        raise ValidationError(f"{name} must be at least 1.")
    return number


def filter_bills(
    *,
    customer_id=None,
    payment_status=None,
    bill_id=None,
    customer_search=None,
    start_date=None,
    end_date=None,
    page=None,
    limit=None,
):
    """Newest-first bill listing with the counter's filters, one page at a time."""
    config = settings.BILLING
    limit = min(
        _positive_int(limit, config.get("DEFAULT_PAGE_SIZE", 10), "limit"),
        config.get("MAX_PAGE_SIZE", 100),
    )
    page = _positive_int(page, 1, "page")

    qs = Bill.objects.select_related("customer")
    customer_id = _positive_int(customer_id, None, "customerId")
    if customer_id:
        qs = qs.filter(customer_id=customer_id)
    if payment_status:
        if payment_status not in dict(PAYMENT_STATUS_CHOICES):
            raise ValidationError(f"Unknown payment status: {payment_status!r}")
        qs = qs.filter(payment_status=payment_status)
    if bill_id:
        qs = qs.filter(bill_id=bill_id)
    if customer_search:
        qs = qs.search(customer_search)

    # whole days in the shop's timezone
    tz = timezone.get_current_timezone()
    if start_date:
        start = _parse_date(start_date, "startDate")
        qs = qs.filter(
            created_at__gte=datetime.datetime.combine(start, datetime.time.min, tzinfo=tz)
        )
    if end_date:
        end = _parse_date(end_date, "endDate")
        qs = qs.filter(
            created_at__lte=datetime.datetime.combine(end, datetime.time.max, tzinfo=tz)
        )

    paginator = Paginator(qs.order_by("-created_at", "-pk"), limit)
    # past the last page gives an empty page rather than an error
    if page > paginator.num_pages:
        return []
    return list(paginator.page(page).object_list)


def pending_bills_for_customer(customer_id):
    """Settlement candidates for a customer, oldest debt first."""
    customer_id = _positive_int(customer_id, None, "customerId")
    return list(
        Bill.objects.for_customer(customer_id)
        .outstanding()
        .oldest_first()
        .prefetch_related("items__spare_part", "payments")
    )
