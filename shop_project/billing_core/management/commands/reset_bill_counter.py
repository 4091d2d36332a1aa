from django.core.management.base import BaseCommand, CommandError

from billing_core.services.audit_helper import log_action
from billing_core.services.sequence import bill_id_sequence, reset_sequence


class Command(BaseCommand):
    help = (
        "Reset the bill id counter to zero. Destructive: only for test or "
        "staging databases whose bills have been wiped."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--yes",  # Define flag
            action="store_true",
            help="Confirm the reset without prompting.",
        )
        parser.add_argument(
            "--name",
            default=None,
            help="Counter to reset (default: the configured bill id counter).",
        )

    def handle(self, *args, **options):
        name = options["name"] or bill_id_sequence()
        if not options["yes"]:
            raise CommandError(f"Refusing to reset counter {name!r} without --yes.")

        counter = reset_sequence(name)
        log_action(action="reset_counter", instance=counter)
        self.stdout.write(self.style.SUCCESS(f"Counter {counter.name} reset to 0."))
