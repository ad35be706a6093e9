from __future__ import annotations

import logging

from django.contrib.auth.models import User
from django.db import IntegrityError, transaction

from arena.exceptions import AlreadyInContest, ContestNotFound, IncorrectPassword
from arena.models import Contest, ContestParticipant

logger = logging.getLogger(__name__)


def join_contest(contest_id, user, password: str | None = None) -> ContestParticipant:
    """
    Adds ``user`` to a contest. A user takes part in one contest at a time;
    password-protected contests need the matching password.
    """
    with transaction.atomic():
        # Serializes concurrent joins by the same user.
        User.objects.select_for_update().filter(pk=user.pk).first()
        if ContestParticipant.objects.filter(user=user).exists():
            raise AlreadyInContest()

        contest = Contest.objects.filter(pk=contest_id).first()
        if contest is None:
            raise ContestNotFound()
        if not contest.check_password(password):
            raise IncorrectPassword()

        role = "creator" if contest.creator_id == user.pk else "participant"
        try:
            with transaction.atomic():
                participant = ContestParticipant.objects.create(contest=contest, user=user, role=role)
        except IntegrityError:
            raise AlreadyInContest()

    logger.info("User %s joined contest %s.", user.pk, contest.pk)
    return participant


def leave_contest(contest_id, user) -> int:
    """Removes ``user`` from the contest; returns how many memberships were dropped."""
    deleted, _ = ContestParticipant.objects.filter(contest_id=contest_id, user=user).delete()
    if deleted:
        logger.info("User %s left contest %s.", user.pk, contest_id)
    return deleted
