from django.core.management.base import BaseCommand, CommandError

from billing_core.models import Bill
from billing_core.services.ledger_audit import audit_bill_ledgers


class Command(BaseCommand):
    help = "Check that every bill's totals agree with its items and payments."

    def add_arguments(self, parser):
        parser.add_argument(
            "bill_ids",
            nargs="*",
            help="Only check these bill ids (default: all bills).",
        )

    def handle(self, *args, **options):
        qs = Bill.objects.all()
        if options["bill_ids"]:
            qs = qs.filter(bill_id__in=options["bill_ids"])

        report = audit_bill_ledgers(qs)
        for bill_id, problems in report.items():
            for problem in problems:
                self.stdout.write(self.style.ERROR(f"Bill {bill_id}: {problem}"))

        if report:
            # non-zero exit so cron / CI notice
            raise CommandError(f"{len(report)} bill(s) do not reconcile.")
        self.stdout.write(self.style.SUCCESS(f"{qs.count()} bill(s) reconcile."))
