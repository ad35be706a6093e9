from datetime import datetime

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from arena.services.clock import contest_zone
from arena.services.weekend import check_weekend_penalties


class Command(BaseCommand):
    help = "Settles the weekend test that just ended (only acts on Mondays)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--at",
            help="Run as of this local date/time (YYYY-MM-DD or YYYY-MM-DDTHH:MM).",
        )

    def handle(self, *args, **options):
        now = timezone.now()
        if options.get("at"):
            try:
                parsed = datetime.fromisoformat(options["at"])
            except ValueError:
                raise CommandError(f"Invalid --at value: {options['at']}")
            now = parsed if timezone.is_aware(parsed) else parsed.replace(tzinfo=contest_zone())

        summary = check_weekend_penalties(now)
        if summary["contests"] == 0 and summary["not_monday"]:
            self.stdout.write(self.style.WARNING("Not Monday in any active contest; nothing settled."))
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Weekend settled: {summary['charged']} charged, {summary['carried']} carried over, "
                f"{summary['silent']} without attempt, {summary['skipped']} skipped, {summary['errors']} errors."
            )
        )
