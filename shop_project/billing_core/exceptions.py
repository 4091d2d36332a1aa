from decimal import Decimal


class BillingError(Exception):
    """Base for failures raised inside a billing transaction.

    `category` tells the caller whether to re-prompt for input
    or show a hard error.
    """
    category = "error"

    def __init__(self, message):
        super().__init__(message)
        self.message = message


# ---------- Not found ----------
class NotFoundError(BillingError):
    category = "not_found"


class BillNotFound(NotFoundError):
    def __init__(self, ref):
        super().__init__(f"Bill {ref} not found.")
        self.ref = ref


class SparePartNotFound(NotFoundError):
    def __init__(self, ref):
        super().__init__(f"Spare part with ID {ref} not found.")
        self.ref = ref


class CustomerNotFound(NotFoundError):
    def __init__(self, ref):
        super().__init__(f"Customer {ref} not found.")
        self.ref = ref


# ---------- Business rules ----------
class BusinessRuleError(BillingError):
    category = "conflict"


class InsufficientStock(BusinessRuleError):
    """Raised when a cart line asks for more units than are on hand."""

    def __init__(self, part, available, requested):
        super().__init__(
            f"Insufficient stock for {part}. "
            f"Available: {available}, Requested: {requested}."
        )
        self.part = part
        self.available = available
        self.requested = requested


class PaymentExceedsPending(BusinessRuleError):
    """Raised when money apportioned to a bill is more than it still owes."""

    def __init__(self, amount: Decimal, pending: Decimal):
        super().__init__(
            f"Payment amount (₹{amount}) exceeds the pending balance (₹{pending})."
        )
        self.amount = amount
        self.pending = pending
