from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError

from arena.exceptions import ArenaError
from arena.models import Profile
from arena.services.verification import verify_solution


class Command(BaseCommand):
    help = "Checks a user's LeetCode submissions and records the problem as solved."

    def add_arguments(self, parser):
        parser.add_argument("username")
        parser.add_argument("problem_id", type=int)
        parser.add_argument(
            "--judge-username",
            help="LeetCode username; defaults to the one stored on the profile.",
        )

    def handle(self, *args, **options):
        user = User.objects.filter(username=options["username"]).first()
        if user is None:
            raise CommandError(f"User {options['username']} not found.")

        judge_username = options.get("judge_username")
        if not judge_username:
            profile = Profile.objects.filter(user=user).first()
            judge_username = profile.leetcode_username if profile else None
        if not judge_username:
            raise CommandError("No LeetCode username given or stored on the profile.")

        try:
            progress = verify_solution(user, options["problem_id"], judge_username)
        except ArenaError as exc:
            raise CommandError(exc.message)

        self.stdout.write(
            self.style.SUCCESS(f"{user.username}: {progress.problem.title} verified at {progress.verified_at}")
        )
