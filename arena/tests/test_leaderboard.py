from django.test import TestCase

from arena.models import Streak, UserProgress, WeekendTest
from arena.services.leaderboard import contest_leaderboard, topic_leaderboard
from arena.tests.helpers import ist, join, make_contest, make_problems, make_topic, make_user


class LeaderboardTests(TestCase):
    def setUp(self):
        self.contest = make_contest(make_user("creator"))
        self.topic = make_topic(self.contest, started_at=ist(2024, 1, 1, 9))
        self.problems = make_problems(self.topic, easy=2, medium=2)
        test = WeekendTest.objects.create(contest=self.contest, starts_on=ist(2024, 1, 6).date())
        test.problems.set(self.problems[2:])

        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.carol = make_user("carol")
        self.dave = make_user("dave")
        join(self.contest, self.alice, is_visible=True, points=30)
        join(self.contest, self.bob, is_visible=True, points=10)
        join(self.contest, self.carol, is_visible=True, points=100)
        join(self.contest, self.dave, is_visible=False, points=500)
        Streak.objects.create(user=self.alice, current_streak=1, longest_streak=4)
        Streak.objects.create(user=self.bob, current_streak=5, longest_streak=5)

        self.solve(self.alice, self.problems, ist(2024, 1, 6, 11))
        self.solve(self.bob, self.problems[2:], ist(2024, 1, 7, 9))
        self.solve(self.carol, self.problems[:2], ist(2024, 1, 3))
        self.solve(self.dave, self.problems, ist(2024, 1, 6, 11))

    def solve(self, user, problems, at):
        for problem in problems:
            UserProgress.objects.create(user=user, topic=self.topic, problem=problem, completed=True, completed_at=at)

    def test_ranked_by_weekend_then_streak_then_points(self):
        rows = contest_leaderboard(self.contest, now=ist(2024, 1, 8, 10))

        self.assertEqual([row.participant.user.username for row in rows], ["bob", "alice", "carol"])
        self.assertEqual([row.rank for row in rows], [1, 2, 3])
        self.assertEqual([row.weekend_solved for row in rows], [2, 2, 0])
        self.assertEqual(rows[1].total_solved, 4)
        self.assertEqual(rows[1].longest_streak, 4)
        self.assertEqual(rows[2].current_streak, 0)

    def test_topic_leaderboard_hides_invisible_participants(self):
        rows = topic_leaderboard(self.topic)
        self.assertEqual([row["username"] for row in rows], ["alice", "bob", "carol"])
        self.assertEqual(rows[0]["solved"], 4)
