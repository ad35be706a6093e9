from django.test import TestCase

from arena.exceptions import NoFreezesLeft
from arena.models import ContestParticipant, Streak
from arena.services.streaks import advance_streak, use_streak_freeze
from arena.tests.helpers import ist, join, make_contest, make_user


class AdvanceStreakTests(TestCase):
    def setUp(self):
        self.user = make_user("alice")

    def test_first_activity_starts_streak_at_one(self):
        streak = advance_streak(self.user, ist(2024, 1, 1))
        self.assertEqual((streak.current_streak, streak.longest_streak), (1, 1))

    def test_next_day_increments(self):
        Streak.objects.create(user=self.user, current_streak=4, longest_streak=4, last_active_at=ist(2024, 1, 1, 23))
        streak = advance_streak(self.user, ist(2024, 1, 2, 0, 5))
        self.assertEqual((streak.current_streak, streak.longest_streak), (5, 5))

    def test_gap_resets_but_longest_is_kept(self):
        Streak.objects.create(user=self.user, current_streak=4, longest_streak=9, last_active_at=ist(2024, 1, 1))
        streak = advance_streak(self.user, ist(2024, 1, 4))
        self.assertEqual((streak.current_streak, streak.longest_streak), (1, 9))
        self.assertEqual(streak.last_active_at, ist(2024, 1, 4))

    def test_same_day_only_moves_last_active(self):
        Streak.objects.create(user=self.user, current_streak=3, longest_streak=3, last_active_at=ist(2024, 1, 1, 8))
        streak = advance_streak(self.user, ist(2024, 1, 1, 21))
        self.assertEqual(streak.current_streak, 3)
        self.assertEqual(streak.last_active_at, ist(2024, 1, 1, 21))

        again = advance_streak(self.user, ist(2024, 1, 1, 22))
        self.assertEqual(again.current_streak, 3)

    def test_participant_streak_follows_transition(self):
        contest = make_contest(make_user("creator"))
        participant = join(contest, self.user, current_streak=2, last_active_at=ist(2024, 1, 1))
        Streak.objects.create(user=self.user, current_streak=2, longest_streak=2, last_active_at=ist(2024, 1, 1))

        advance_streak(self.user, ist(2024, 1, 2), contest=contest)
        participant.refresh_from_db()
        self.assertEqual(participant.current_streak, 3)

        advance_streak(self.user, ist(2024, 1, 2, 20), contest=contest)
        participant.refresh_from_db()
        self.assertEqual(participant.current_streak, 3)

        advance_streak(self.user, ist(2024, 1, 9), contest=contest)
        self.assertEqual(ContestParticipant.objects.get(pk=participant.pk).current_streak, 1)

    def test_each_contest_streak_moves_once_per_day(self):
        creator = make_user("creator")
        first = make_contest(creator, name="Arrays")
        second = make_contest(creator, name="Graphs")
        join(first, self.user)
        join(second, self.user)

        for day in (1, 2, 3):
            advance_streak(self.user, ist(2024, 1, day, 9), contest=first)
            advance_streak(self.user, ist(2024, 1, day, 21), contest=second)
            advance_streak(self.user, ist(2024, 1, day, 22), contest=second)

        self.assertEqual(Streak.objects.get(user=self.user).current_streak, 3)
        self.assertEqual(ContestParticipant.objects.get(contest=first, user=self.user).current_streak, 3)
        self.assertEqual(ContestParticipant.objects.get(contest=second, user=self.user).current_streak, 3)

    def test_contest_streak_resets_on_its_own_gap(self):
        contest = make_contest(make_user("creator"))
        join(contest, self.user, current_streak=5, last_active_at=ist(2024, 1, 1))
        Streak.objects.create(user=self.user, current_streak=5, longest_streak=5, last_active_at=ist(2024, 1, 3))

        advance_streak(self.user, ist(2024, 1, 4), contest=contest)

        self.assertEqual(Streak.objects.get(user=self.user).current_streak, 6)
        self.assertEqual(ContestParticipant.objects.get(contest=contest, user=self.user).current_streak, 1)


class StreakFreezeTests(TestCase):
    def setUp(self):
        self.user = make_user("bob")

    def test_freeze_keeps_streak_alive(self):
        Streak.objects.create(user=self.user, current_streak=6, longest_streak=6, last_active_at=ist(2024, 1, 1))
        use_streak_freeze(self.user, ist(2024, 1, 2))
        streak = advance_streak(self.user, ist(2024, 1, 3))
        self.assertEqual(streak.current_streak, 7)
        self.assertEqual(streak.freezes_left, 1)

    def test_freeze_covers_contest_streaks(self):
        contest = make_contest(make_user("creator"))
        join(contest, self.user, current_streak=6, last_active_at=ist(2024, 1, 1))
        Streak.objects.create(user=self.user, current_streak=6, longest_streak=6, last_active_at=ist(2024, 1, 1))

        use_streak_freeze(self.user, ist(2024, 1, 2))
        advance_streak(self.user, ist(2024, 1, 3), contest=contest)

        self.assertEqual(ContestParticipant.objects.get(contest=contest, user=self.user).current_streak, 7)

    def test_no_freezes_left(self):
        Streak.objects.create(user=self.user, current_streak=1, longest_streak=1, freezes_left=0)
        with self.assertRaises(NoFreezesLeft):
            use_streak_freeze(self.user, ist(2024, 1, 2))

    def test_freeze_without_streak_record(self):
        with self.assertRaises(NoFreezesLeft):
            use_streak_freeze(self.user)
