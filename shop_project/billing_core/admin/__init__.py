from .actions import recheck_bill_ledger, reset_counters
from .auditlog import AuditLogAdmin, CounterAdmin
from .bill import BillAdmin
from .catalog import CustomerAdmin, SparePartAdmin
from .inlines import BillItemInline, PaymentInline
from .readonly import ReadOnlyAdmin
