import logging
from typing import Iterable, List

from django.utils import timezone

from ..allocation import BillBalance, BillUpdate
from ..exceptions import BillNotFound
from ..models import Bill, Payment

logger = logging.getLogger(__name__)


# ----------------------------
# Bill record store
# ----------------------------
def lock_bill(bill_pk) -> Bill:
    """Load a bill and hold its row until the transaction ends."""
    try:
        return Bill.objects.select_for_update().get(pk=bill_pk)
    except (Bill.DoesNotExist, ValueError, TypeError):
        raise BillNotFound(bill_pk)


def balance_of(bill: Bill) -> BillBalance:
    return BillBalance(
        ref=bill.pk,
        bill_id=bill.bill_id,
        amount_paid=bill.amount_paid,
        pending_amount=bill.pending_amount,
    )


def lock_settlement_targets(customer_id, refs: Iterable, *, exclude_pk=None) -> List[Bill]:
    """
    Lock the bills picked for settlement, oldest first.

    The list is advisory: it was built before this transaction
    started, so refs that vanished, were cleared meanwhile or belong
    to another customer are logged and skipped.
    """
    wanted = []
    for ref in refs:
        if ref not in wanted and ref != exclude_pk:
            wanted.append(ref)
    if not wanted:
        return []

    bills = list(
        Bill.objects.select_for_update()
        .filter(pk__in=wanted, customer_id=customer_id)
        .outstanding()
        .oldest_first()
    )
    found = {b.pk for b in bills}
    for ref in wanted:
        if ref not in found:
            logger.warning(
                "Skipping settlement target %s: missing, cleared or not owned by customer %s",
                ref, customer_id,
            )
    return bills


def write_entries(bill: Bill, entries, *, when=None) -> List[Payment]:
    when = when or timezone.now()
    rows = []
    for entry in entries:
        rows.append(
            Payment.objects.create(
                bill=bill,
                amount=entry.amount,
                kind=entry.kind,
                source=entry.label,
                date=when,
                source_bill_ids=entry.source_bill_ids,
            )
        )
    return rows


def apply_update(bill: Bill, update: BillUpdate, *, when=None) -> Bill:
    """Write an allocator result back onto a locked bill."""
    bill.amount_paid = update.amount_paid
    bill.pending_amount = update.pending_amount
    bill.payment_status = update.payment_status
    bill.save(update_fields=[
        "amount_paid", "pending_amount", "payment_status", "updated_at"
    ])
    write_entries(bill, update.entries, when=when)
    return bill


def fetch_bill_detail(bill_pk) -> Bill:
    try:
        return Bill.objects.with_details().get(pk=bill_pk)
    except (Bill.DoesNotExist, ValueError, TypeError):
        raise BillNotFound(bill_pk)
