import logging
from dataclasses import dataclass
from typing import Tuple

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..allocation import (PREVIOUS_BILLS_LABEL, TENDERS, ZERO, DirectPayment,
                          PendingClearance, allocate)
from ..exceptions import PaymentExceedsPending
from ..models import Bill
from .audit_helper import log_action
from .billing import parse_ref, parse_tenders
from .records import (apply_update, balance_of, fetch_bill_detail, lock_bill,
                      lock_settlement_targets)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillPaymentResult:
    bill: Bill
    clearances: Tuple[PendingClearance, ...]


def _default_tender() -> str:
    return settings.BILLING.get("DEFAULT_TENDER", "Cash")


# ----------------------------
# Payment-related workflows
# ----------------------------
def record_bill_payment(bill_pk, *, payments, settle_bill_ids=(), user=None) -> BillPaymentResult:
    """
    Record new payments against an existing bill.

    Entries labelled "Payment for Previous Bills" form a separate pool
    that clears the bills in `settle_bill_ids`, oldest first. Whatever
    that pool cannot place lands on this bill with the tender of the
    first direct entry (or the configured default tender).
    Locks the bill row so two payments never both pass the pending
    check against a stale balance.
    """
    bill_pk = parse_ref(bill_pk, "bill id")
    submitted = parse_tenders(payments, allowed=TENDERS + (PREVIOUS_BILLS_LABEL,))
    if not submitted:
        raise ValidationError("At least one payment is required.")

    # Partition: money for this bill vs. money for previous bills
    direct = [t for t in submitted if t.source != PREVIOUS_BILLS_LABEL]
    pool = sum(
        (t.amount for t in submitted if t.source == PREVIOUS_BILLS_LABEL), ZERO
    )
    refs = [parse_ref(ref, "bill id") for ref in (settle_bill_ids or [])]
    if pool > ZERO and not refs:
        raise ValidationError(
            "Payments for previous bills need the bills to settle.")

    direct_total = sum((t.amount for t in direct), ZERO)

    with transaction.atomic():
        bill = lock_bill(bill_pk)

        # checked against the locked row, not a value read earlier
        if direct_total > bill.pending_amount:
            raise PaymentExceedsPending(direct_total, bill.pending_amount)

        old_bills = lock_settlement_targets(bill.customer_id, refs, exclude_pk=bill.pk)
        by_pk = {b.pk: b for b in old_bills}

        tenders = list(direct)
        if pool > ZERO:
            leftover_source = direct[0].source if direct else _default_tender()
            tenders.append(DirectPayment(amount=pool, source=leftover_source))

        plan = allocate(
            current=balance_of(bill),
            tenders=tenders,
            other_bills=[balance_of(b) for b in old_bills],
            settlement_budget=pool,
        )

        now = timezone.now()
        for update in plan.settled:
            apply_update(by_pk[update.ref], update, when=now)
        apply_update(bill, plan.current, when=now)

        log_action(
            action="record_payment",
            instance=bill,
            user=user,
            changes={
                "bill_id": bill.bill_id,
                "amount": str(plan.applied_to_current),
                "pending_amount": str(bill.pending_amount),
                "settled": [c.as_dict() for c in plan.clearances],
            },
        )

    logger.info(
        "Recorded payment on bill %s amount=%s status=%s",
        bill.bill_id, plan.applied_to_current, bill.payment_status,
    )
    return BillPaymentResult(
        bill=fetch_bill_detail(bill.pk), clearances=plan.clearances
    )
