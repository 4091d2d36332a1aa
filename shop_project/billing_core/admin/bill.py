from django.contrib import admin

from billing_core.models import Bill

from .actions import recheck_bill_ledger
from .inlines import BillItemInline, PaymentInline


# Register `Bill` model
@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = (
        "bill_id",
        "customer_name",
        "customer_phone",
        "total_amount",
        "amount_paid",
        "pending_amount",
        "payment_status",
        "created_at",
    )
    list_filter = ("payment_status", "created_at")
    search_fields = ("bill_id", "customer_name", "customer_phone")
    actions = [recheck_bill_ledger]
    inlines = [BillItemInline, PaymentInline]
    date_hierarchy = "created_at"

    # Money moves only through the billing workflows
    readonly_fields = (
        "bill_id",
        "customer",
        "customer_name",
        "customer_phone",
        "total_amount",
        "discount_amount",
        "amount_paid",
        "pending_amount",
        "payment_status",
        "created_at",
        "updated_at",
    )

    # Fetch everything in one SQL join
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("customer")

    # Bills are created at the counter, not in the admin
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        # A bill with payment history is part of the audit trail
        if obj and obj.payments.exists():
            return False  # removes "Delete" option from admin for that bill
        return super().has_delete_permission(request, obj)
