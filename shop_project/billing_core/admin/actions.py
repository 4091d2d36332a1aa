from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from billing_core.services.audit_helper import log_action
from billing_core.services.ledger_audit import find_ledger_discrepancies
from billing_core.services.sequence import reset_sequence

# ---------- Admin actions ----------


@admin.action(description="Re-check ledger of selected bills")
def recheck_bill_ledger(modeladmin, request, queryset):
    """
    Admin action: compare each selected bill's stored totals with
    its items and payment history. Reports mismatches per bill;
    nothing is written.
    """
    clean = 0
    for bill in queryset.prefetch_related("items", "payments"):
        problems = find_ledger_discrepancies(bill)
        if problems:
            modeladmin.message_user(
                request,
                _("Bill %(bill)s: %(problems)s") % {
                    "bill": bill.bill_id, "problems": "; ".join(problems)
                },
                level=messages.ERROR,
            )
        else:
            clean += 1

    # Final summary message
    total = queryset.count()
    modeladmin.message_user(
        request,
        _("%(clean)d of %(total)d bills reconcile.") % {"clean": clean, "total": total},
        level=messages.SUCCESS if clean == total else messages.WARNING,
    )


@admin.action(description="Reset selected counters to zero")
def reset_counters(modeladmin, request, queryset):
    # staging/test resets only: bill ids start over from 1
    for counter in queryset:
        counter = reset_sequence(counter.name)
        log_action(action="reset_counter", instance=counter, user=request.user)
        modeladmin.message_user(request, f"Counter {counter.name} reset to 0")
