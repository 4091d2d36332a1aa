import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..allocation import (TENDERS, ZERO, BillBalance, DirectPayment,
                          PendingClearance, allocate, to_money)
from ..models import Bill, BillItem
from .audit_helper import log_action
from .customers import resolve_customer
from .records import (apply_update, balance_of, lock_settlement_targets,
                      write_entries)
from .sequence import bill_id_sequence, next_value
from .stock import decrement_stock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLine:
    spare_part_id: int
    quantity: int
    unit_price: Optional[Decimal]
    name: Optional[str] = None


@dataclass(frozen=True)
class BillRequest:
    lines: Tuple[CartLine, ...]
    customer_id: Optional[int]
    customer_name: Optional[str]
    customer_phone: Optional[str]
    customer_address: Optional[str]
    discount_amount: Decimal
    tenders: Tuple[DirectPayment, ...]
    pending_bill_refs: Tuple[int, ...]
    notes: Optional[str]


@dataclass(frozen=True)
class BillCreationResult:
    bill: Bill
    clearances: Tuple[PendingClearance, ...]


# ----------------------------
# Input validation (no transaction yet)
# ----------------------------
def parse_ref(value, what="id") -> int:
    try:
        ref = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Malformed {what}: {value!r}")
    if ref <= 0:
        raise ValidationError(f"Malformed {what}: {value!r}")
    return ref


def parse_quantity(value) -> int:
    # whole units only; 2.9 is a typo, not 2
    if isinstance(value, bool):
        raise ValidationError(f"Malformed quantity: {value!r}")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Malformed quantity: {value!r}")
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(f"Malformed quantity: {value!r}")
    if number <= 0:
        raise ValidationError("Item quantity must be greater than zero.")
    return int(number)


def parse_tenders(payments, allowed=TENDERS) -> List[DirectPayment]:
    tenders = []
    for entry in payments or []:
        if not isinstance(entry, dict):
            raise ValidationError("Each payment must be an object with amount and source.")
        amount = to_money(entry.get("amount"))
        source = entry.get("source")
        if amount <= ZERO:
            raise ValidationError("Payment amounts must be greater than zero.")
        if source not in allowed:
            raise ValidationError(
                f"Payment source {source!r} is not one of {', '.join(allowed)}."
            )
        tenders.append(DirectPayment(amount=amount, source=source))
    return tenders


def build_bill_request(
    *,
    items,
    customer=None,
    customer_name=None,
    customer_phone=None,
    customer_address=None,
    discount_amount=0,
    payments=(),
    pending_bills_to_clear=(),
    notes=None,
) -> BillRequest:
    """Check a bill submission before any row is touched."""
    errors = []
    if customer is None and not (customer_name and customer_phone):
        errors.append("A customer or a new customer's name and phone is required.")
    if not items:
        errors.append("At least one item is required.")
    if errors:
        raise ValidationError(errors)

    lines = []
    for raw in items:
        if not isinstance(raw, dict):
            raise ValidationError("Each item must be an object.")
        quantity = parse_quantity(raw.get("quantity"))
        unit_price = raw.get("unit_price")
        if unit_price is not None:
            unit_price = to_money(unit_price)
            if unit_price < ZERO:
                raise ValidationError("Unit price cannot be negative.")
        lines.append(
            CartLine(
                spare_part_id=parse_ref(raw.get("spare_part"), "spare part id"),
                quantity=quantity,
                unit_price=unit_price,
                name=raw.get("name"),
            )
        )

    discount = to_money(discount_amount or 0)
    if discount < ZERO:
        raise ValidationError("Discount cannot be negative.")

    return BillRequest(
        lines=tuple(lines),
        customer_id=parse_ref(customer, "customer id") if customer is not None else None,
        customer_name=customer_name,
        customer_phone=customer_phone,
        customer_address=customer_address,
        discount_amount=discount,
        tenders=tuple(parse_tenders(payments)),
        pending_bill_refs=tuple(
            parse_ref(ref, "bill id") for ref in (pending_bills_to_clear or [])
        ),
        notes=notes or None,
    )


# ----------------------------
# Bill creation workflow
# ----------------------------
def create_bill(request: BillRequest, user=None) -> BillCreationResult:
    """
    Create a bill from a cart, take the stock, and apply the payment
    pool to the customer's selected older bills first (oldest first)
    and the new bill after. Either everything is written or nothing:
    stock, counter and older bills roll back on any failure.
    """
    with transaction.atomic():
        customer = resolve_customer(
            customer_id=request.customer_id,
            name=request.customer_name,
            phone=request.customer_phone,
            address=request.customer_address,
        )

        bill_id = str(next_value(bill_id_sequence()))

        # Take stock in part id order so two carts never lock rows
        # in opposite orders
        parts = {}
        for line in sorted(request.lines, key=lambda l: l.spare_part_id):
            parts[line.spare_part_id] = decrement_stock(line.spare_part_id, line.quantity)

        # Freeze each line, in cart order, before summing
        frozen = []
        for line in request.lines:
            part = parts[line.spare_part_id]
            unit_price = line.unit_price if line.unit_price is not None else part.price
            frozen.append((part, line, unit_price, line.quantity * unit_price))

        gross = sum((subtotal for *_, subtotal in frozen), ZERO)
        if request.discount_amount > gross:
            raise ValidationError(
                f"Discount {request.discount_amount} exceeds the bill subtotal {gross}."
            )
        total = gross - request.discount_amount

        old_bills = lock_settlement_targets(customer.pk, request.pending_bill_refs)
        by_pk = {b.pk: b for b in old_bills}

        plan = allocate(
            current=BillBalance(
                ref=None, bill_id=bill_id, amount_paid=ZERO, pending_amount=total
            ),
            tenders=request.tenders,
            other_bills=[balance_of(b) for b in old_bills],
        )

        now = timezone.now()
        bill = Bill.objects.create(
            bill_id=bill_id,
            customer=customer,
            customer_name=customer.name,
            customer_phone=customer.phone,
            total_amount=total,
            discount_amount=request.discount_amount,
            amount_paid=plan.current.amount_paid,
            pending_amount=plan.current.pending_amount,
            payment_status=plan.current.payment_status,
            notes=request.notes,
            created_at=now,
        )
        for part, line, unit_price, _ in frozen:
            BillItem.objects.create(
                bill=bill,
                spare_part=part,
                name=line.name or part.category,
                device_model=list(part.device_model or []),
                brand=list(part.brand or []),
                box_number=part.box_number,
                quantity=line.quantity,
                unit_price=unit_price,
            )
        write_entries(bill, plan.current.entries, when=now)

        for update in plan.settled:
            apply_update(by_pk[update.ref], update, when=now)

        log_action(
            action="create_bill",
            instance=bill,
            user=user,
            changes={
                "bill_id": bill.bill_id,
                "total_amount": str(bill.total_amount),
                "amount_paid": str(bill.amount_paid),
                "settled": [c.as_dict() for c in plan.clearances],
            },
        )

    logger.info(
        "Created bill %s total=%s status=%s settled=%d",
        bill.bill_id, bill.total_amount, bill.payment_status, len(plan.clearances),
    )
    return BillCreationResult(bill=bill, clearances=plan.clearances)
