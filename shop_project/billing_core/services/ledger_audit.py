import logging

from ..allocation import (SETTLED_TOLERANCE, ZERO, FULLY_PAID, UNPAID,
                          derive_payment_status, pending_for)
from ..models import Bill

logger = logging.getLogger(__name__)


def find_ledger_discrepancies(bill: Bill) -> list:
    """Every way this bill's stored numbers disagree with each other."""
    problems = []

    expected_pending = pending_for(bill.total_amount, bill.amount_paid)
    if abs(bill.pending_amount - expected_pending) > SETTLED_TOLERANCE:
        problems.append(
            f"pending {bill.pending_amount} != total - paid ({expected_pending})"
        )

    _, expected_status = derive_payment_status(bill.pending_amount, bill.amount_paid)
    if bill.payment_status != expected_status:
        problems.append(
            f"status {bill.payment_status!r} should be {expected_status!r}"
        )
    if (bill.pending_amount <= SETTLED_TOLERANCE) != (bill.payment_status == FULLY_PAID):
        problems.append("fully paid flag disagrees with pending amount")
    if bill.amount_paid == ZERO and bill.payment_status != UNPAID and bill.total_amount > ZERO:
        problems.append("nothing paid but status is not Unpaid")

    items_total = sum((i.subtotal for i in bill.items.all()), ZERO)
    if items_total != bill.total_amount + bill.discount_amount:
        problems.append(
            f"items sum {items_total} != total + discount "
            f"({bill.total_amount + bill.discount_amount})"
        )

    ledger_paid = bill.ledger_paid_total()
    if ledger_paid != bill.amount_paid:
        problems.append(
            f"payments sum {ledger_paid} != amount paid {bill.amount_paid}"
        )
    return problems


def audit_bill_ledgers(queryset=None) -> dict:
    """Check bills and log each one that does not reconcile."""
    qs = queryset if queryset is not None else Bill.objects.all()
    report = {}
    for bill in qs.prefetch_related("items", "payments").iterator(chunk_size=500):
        problems = find_ledger_discrepancies(bill)
        if problems:
            logger.warning("Bill %s does not reconcile: %s", bill.bill_id, "; ".join(problems))
            report[bill.bill_id] = problems
    return report
