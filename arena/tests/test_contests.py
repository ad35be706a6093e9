from django.test import TestCase

from arena.exceptions import AlreadyInContest, ContestNotFound, IncorrectPassword
from arena.models import ContestParticipant
from arena.services.contests import join_contest, leave_contest
from arena.tests.helpers import make_contest, make_user


class JoinContestTests(TestCase):
    def setUp(self):
        self.creator = make_user("creator")
        self.alice = make_user("alice")
        self.contest = make_contest(self.creator)

    def test_join_open_contest(self):
        participant = join_contest(self.contest.pk, self.alice)
        self.assertEqual(participant.contest, self.contest)
        self.assertEqual(participant.role, "participant")
        self.assertFalse(participant.is_visible)

    def test_creator_joins_with_creator_role(self):
        self.assertEqual(join_contest(self.contest.pk, self.creator).role, "creator")

    def test_one_contest_per_user(self):
        other = make_contest(self.creator, name="Graphs")
        join_contest(self.contest.pk, self.alice)

        with self.assertRaises(AlreadyInContest):
            join_contest(other.pk, self.alice)
        with self.assertRaises(AlreadyInContest):
            join_contest(self.contest.pk, self.alice)
        self.assertEqual(ContestParticipant.objects.filter(user=self.alice).count(), 1)

    def test_unknown_contest(self):
        with self.assertRaises(ContestNotFound):
            join_contest(424242, self.alice)

    def test_password_protected_contest(self):
        self.contest.set_password("s3cret")
        self.contest.save()
        self.assertNotEqual(self.contest.password, "s3cret")

        with self.assertRaises(IncorrectPassword):
            join_contest(self.contest.pk, self.alice)
        with self.assertRaises(IncorrectPassword):
            join_contest(self.contest.pk, self.alice, password="wrong")
        self.assertFalse(ContestParticipant.objects.exists())

        join_contest(self.contest.pk, self.alice, password="s3cret")
        self.assertTrue(ContestParticipant.objects.filter(user=self.alice).exists())


class LeaveContestTests(TestCase):
    def test_leave_then_join_another(self):
        creator = make_user("creator")
        alice = make_user("alice")
        first = make_contest(creator)
        second = make_contest(creator, name="Graphs")
        join_contest(first.pk, alice)

        self.assertEqual(leave_contest(first.pk, alice), 1)
        self.assertEqual(leave_contest(first.pk, alice), 0)
        self.assertEqual(join_contest(second.pk, alice).contest, second)
