from django.contrib import admin

from billing_core.models import BillItem, Payment

# ---------- Inline admin classes for the bill page ----------


class BillItemInline(admin.TabularInline):
    """Sold lines under a Bill page; frozen once the bill exists"""

    model = BillItem
    extra = 0  # don't show "empty" rows by default
    fields = (
        "spare_part", "name", "device_model", "brand",
        "box_number", "quantity", "unit_price", "subtotal",
    )
    readonly_fields = fields
    ordering = ("id",)  # lines appear in sale order
    can_delete = False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("spare_part")

    # New lines only come from the bill creation workflow
    def has_add_permission(self, request, obj=None):
        return False


class PaymentInline(admin.TabularInline):
    """Payment history of a bill, oldest first"""

    model = Payment
    extra = 0
    fields = ("date", "amount", "kind", "source", "source_bill_ids")
    # always read-only, protects the audit trail
    readonly_fields = fields
    ordering = ("id",)
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False
