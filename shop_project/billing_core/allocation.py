"""
Payment allocation for bills.

Pure functions only: nothing here touches the database. Workflows load
the bill balances, call `allocate()` and write the resulting plan back
inside their own transaction.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence, Tuple

from django.core.exceptions import ValidationError

from .exceptions import PaymentExceedsPending

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

# Pending balances at or below this are treated as settled.
# Absorbs rounding residue from currency math, not a business rule.
SETTLED_TOLERANCE = Decimal("0.01")

# Largest value a DecimalField(max_digits=12, decimal_places=2) column holds
MAX_AMOUNT = Decimal("9999999999.99")

# ---------- Payment status ----------
UNPAID = "Unpaid"
PARTIALLY_PAID = "Partially Paid"
FULLY_PAID = "Fully Paid"

PAYMENT_STATUS_CHOICES = [
    (UNPAID, "Unpaid"),
    (PARTIALLY_PAID, "Partially Paid"),
    (FULLY_PAID, "Fully Paid"),
]

# ---------- Payment sources ----------
# Tenders a cashier can pick
CASH = "Cash"
UPI = "UPI"
CARD = "Card"
TENDERS = (CASH, UPI, CARD)

# Labels written by the settlement flow, never picked by a user
SETTLEMENT_OUTFLOW_LABEL = "From settlement of other bills"
SETTLEMENT_INFLOW_LABEL = "Settlement applied to other bill"

PAYMENT_SOURCE_CHOICES = [
    (CASH, "Cash"),
    (UPI, "UPI"),
    (CARD, "Card"),
    (SETTLEMENT_OUTFLOW_LABEL, SETTLEMENT_OUTFLOW_LABEL),
    (SETTLEMENT_INFLOW_LABEL, SETTLEMENT_INFLOW_LABEL),
]

# Request-side marker for money meant for a customer's older bills
PREVIOUS_BILLS_LABEL = "Payment for Previous Bills"

# ---------- Payment kinds (persisted tag) ----------
DIRECT = "direct"
SETTLEMENT_OUTFLOW = "settlement_outflow"
SETTLEMENT_INFLOW = "settlement_inflow"

PAYMENT_KIND_CHOICES = [
    (DIRECT, "Direct"),
    (SETTLEMENT_OUTFLOW, "Settlement outflow"),
    (SETTLEMENT_INFLOW, "Settlement inflow"),
]


def to_money(value) -> Decimal:
    """Parse `value` into a 2-place Decimal, rejecting junk input."""
    if isinstance(value, float):
        # go through str so 0.1 stays 0.1
        value = str(value)
    try:
        amount = Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}")
    if not amount.is_finite() or abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"Invalid amount: {value!r}")
    return amount


def pending_for(total: Decimal, paid: Decimal) -> Decimal:
    # floor-clamped, a bill never owes a negative amount
    return max(total - paid, ZERO)


def derive_payment_status(pending: Decimal, paid: Decimal) -> Tuple[Decimal, str]:
    """
    Single source of truth for a bill's status.
    Returns the (possibly clamped) pending amount with the status.
    """
    if pending <= SETTLED_TOLERANCE:
        return ZERO, FULLY_PAID
    if paid > ZERO:
        return pending, PARTIALLY_PAID
    return pending, UNPAID


# ----------------------------
# Payment entry variants
# ----------------------------
@dataclass(frozen=True)
class DirectPayment:
    """Money tendered straight onto a bill (Cash, UPI, Card)."""
    amount: Decimal
    source: str

    kind = DIRECT

    @property
    def label(self):
        return self.source

    @property
    def source_bill_ids(self):
        return []


@dataclass(frozen=True)
class SettlementOutflow:
    """Audit row on the current bill: part of its pool paid older bills."""
    amount: Decimal
    target_bill_ids: Tuple[str, ...]

    kind = SETTLEMENT_OUTFLOW
    label = SETTLEMENT_OUTFLOW_LABEL

    @property
    def source_bill_ids(self):
        return list(self.target_bill_ids)


@dataclass(frozen=True)
class SettlementInflow:
    """Row on an older bill: it was paid from another bill's pool."""
    amount: Decimal
    origin_bill_id: str

    kind = SETTLEMENT_INFLOW
    label = SETTLEMENT_INFLOW_LABEL

    @property
    def source_bill_ids(self):
        return [self.origin_bill_id]


# ----------------------------
# Inputs / outputs
# ----------------------------
@dataclass(frozen=True)
class BillBalance:
    # ref is the storage pk, None for a bill not saved yet
    ref: Optional[int]
    bill_id: str
    amount_paid: Decimal
    pending_amount: Decimal


@dataclass(frozen=True)
class BillUpdate:
    ref: Optional[int]
    bill_id: str
    amount_paid: Decimal
    pending_amount: Decimal
    payment_status: str
    entries: Tuple[object, ...]


@dataclass(frozen=True)
class PendingClearance:
    ref: Optional[int]
    bill_id: str
    amount_cleared: Decimal
    new_pending_amount: Decimal

    def as_dict(self):
        return {
            "billId": self.bill_id,
            "amountCleared": str(self.amount_cleared),
            "newPendingAmount": str(self.new_pending_amount),
        }


@dataclass(frozen=True)
class AllocationPlan:
    current: BillUpdate
    settled: Tuple[BillUpdate, ...]
    clearances: Tuple[PendingClearance, ...]
    applied_to_current: Decimal
    applied_to_settlements: Decimal


def _attribute(tenders: Sequence[DirectPayment], amount: Decimal) -> List[DirectPayment]:
    # walk tenders in submission order until `amount` is covered
    entries = []
    remaining = amount
    for tender in tenders:
        if remaining <= ZERO:
            break
        portion = min(tender.amount, remaining)
        if portion > ZERO:
            entries.append(DirectPayment(amount=portion, source=tender.source))
        remaining -= portion
    return entries


def allocate(
    *,
    current: BillBalance,
    tenders: Sequence[DirectPayment],
    other_bills: Iterable[BillBalance] = (),
    settlement_budget: Optional[Decimal] = None,
) -> AllocationPlan:
    """
    Distribute an incoming pool across older bills and the current bill.

    `other_bills` must already be ordered oldest-created-first; they are
    cleared in that order until the pool (or `settlement_budget`, when
    given) runs out. What is left goes to `current`. If that is more
    than `current` still owes, PaymentExceedsPending is raised and no
    plan is produced.
    """
    total_incoming = sum((t.amount for t in tenders), ZERO)
    if any(t.amount <= ZERO for t in tenders):
        raise ValidationError("Payment amounts must be greater than zero.")

    budget = total_incoming
    if settlement_budget is not None:
        budget = min(settlement_budget, total_incoming)

    settled = []
    clearances = []
    used = ZERO

    # 1. Oldest debts first
    for bill in other_bills:
        remaining_budget = budget - used
        if remaining_budget <= ZERO:
            break
        if bill.pending_amount <= ZERO:
            continue
        amount_to_clear = min(bill.pending_amount, remaining_budget)
        paid = bill.amount_paid + amount_to_clear
        pending, status = derive_payment_status(
            bill.pending_amount - amount_to_clear, paid
        )
        settled.append(
            BillUpdate(
                ref=bill.ref,
                bill_id=bill.bill_id,
                amount_paid=paid,
                pending_amount=pending,
                payment_status=status,
                entries=(SettlementInflow(amount_to_clear, current.bill_id),),
            )
        )
        clearances.append(
            PendingClearance(
                ref=bill.ref,
                bill_id=bill.bill_id,
                amount_cleared=amount_to_clear,
                new_pending_amount=pending,
            )
        )
        used += amount_to_clear

    # 2. Remainder belongs to the current bill, never more than it owes
    for_current = total_incoming - used
    if for_current > current.pending_amount:
        raise PaymentExceedsPending(for_current, current.pending_amount)

    # 3. Direct rows plus one outflow row for the audit timeline
    entries = _attribute(tenders, for_current)
    if used > ZERO:
        entries.append(
            SettlementOutflow(used, tuple(u.bill_id for u in settled))
        )

    # 4. Status of the current bill
    paid = current.amount_paid + for_current
    pending, status = derive_payment_status(
        current.pending_amount - for_current, paid
    )

    return AllocationPlan(
        current=BillUpdate(
            ref=current.ref,
            bill_id=current.bill_id,
            amount_paid=paid,
            pending_amount=pending,
            payment_status=status,
            entries=tuple(entries),
        ),
        settled=tuple(settled),
        clearances=tuple(clearances),
        applied_to_current=for_current,
        applied_to_settlements=used,
    )
