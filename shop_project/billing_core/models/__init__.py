from .auditlog import AuditLog
from .bill import Bill, BillItem, Payment
from .customer import Customer
from .sequence import Counter
from .spare_part import IN_STOCK, OUT_OF_STOCK, SparePart, stock_status
