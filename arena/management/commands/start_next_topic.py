from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError

from arena.exceptions import ArenaError
from arena.services.topics import advance_topic, can_advance


class Command(BaseCommand):
    help = "Closes the active topic of a contest and starts the next one."

    def add_arguments(self, parser):
        parser.add_argument("contest_id", type=int)
        parser.add_argument(
            "--as-user",
            help="Username acting as creator; the creator check is skipped when omitted.",
        )
        parser.add_argument(
            "--check",
            action="store_true",
            help="Only report whether the contest can advance.",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Advance even if some participants have not finished the topic.",
        )

    def handle(self, *args, **options):
        contest_id = options["contest_id"]
        actor = None
        if options.get("as_user"):
            actor = User.objects.filter(username=options["as_user"]).first()
            if actor is None:
                raise CommandError(f"User {options['as_user']} not found.")

        try:
            check = can_advance(contest_id, requesting_user=actor)
            if options.get("check"):
                style = self.style.SUCCESS if check.allowed else self.style.WARNING
                self.stdout.write(style(check.reason))
                return
            if not check.allowed and not options.get("force"):
                raise CommandError(check.reason)
            topic = advance_topic(contest_id, actor)
        except ArenaError as exc:
            raise CommandError(exc.message)

        self.stdout.write(self.style.SUCCESS(f"Started topic #{topic.order_index}: {topic.name}"))
