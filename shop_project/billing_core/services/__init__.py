from ..allocation import allocate, derive_payment_status
from .billing import (BillCreationResult, BillRequest, build_bill_request,
                      create_bill)
from .customers import resolve_customer
from .ledger_audit import audit_bill_ledgers, find_ledger_discrepancies
from .payment import BillPaymentResult, record_bill_payment
from .queries import filter_bills, pending_bills_for_customer
from .sequence import bill_id_sequence, next_value, reset_sequence
from .stock import decrement_stock, set_quantity, stock_status
