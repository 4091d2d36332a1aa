import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def audit_bill_ledgers(bill_ids=None):
    """
    Re-check every bill (or just `bill_ids`) against its own numbers.
    Returns the report so it shows up in the result backend.
    """
    # import lazily to avoid loading models when celery imports tasks
    from .models import Bill
    from .services.ledger_audit import audit_bill_ledgers as run_audit

    qs = Bill.objects.all()
    if bill_ids:
        qs = qs.filter(bill_id__in=[str(b) for b in bill_ids])

    report = run_audit(qs)
    logger.info("Ledger audit finished: %d bill(s) with problems", len(report))
    return {"checked": qs.count(), "problems": report}
