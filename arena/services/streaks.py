from __future__ import annotations

import logging
from datetime import datetime

from django.db.models import F
from django.utils import timezone

from arena.exceptions import NoFreezesLeft
from arena.models import ContestParticipant, Streak
from arena.services.clock import contest_zone, days_between

logger = logging.getLogger(__name__)

SAME_DAY = "same_day"
CONTINUED = "continued"
RESET = "reset"

MAX_CAS_ATTEMPTS = 3


def streak_transition(last_active_at: datetime | None, now: datetime, tz) -> str:
    if last_active_at is None:
        return RESET
    diff = days_between(last_active_at, now, tz)
    if diff <= 0:
        return SAME_DAY
    if diff == 1:
        return CONTINUED
    return RESET


def _advance_participant(contest, user, now: datetime, tz) -> ContestParticipant | None:
    """
    Per-contest half of the streak. It keeps its own ``last_active_at`` so a
    user active in several contests moves each contest's streak once a day.
    """
    for _ in range(MAX_CAS_ATTEMPTS):
        participant = ContestParticipant.objects.filter(contest=contest, user=user).first()
        if participant is None:
            return None
        transition = streak_transition(participant.last_active_at, now, tz)
        if transition == SAME_DAY:
            return participant

        new_current = F("current_streak") + 1 if transition == CONTINUED else 1
        updated = ContestParticipant.objects.filter(
            pk=participant.pk,
            last_active_at=participant.last_active_at,
        ).update(current_streak=new_current, last_active_at=now)
        if updated:
            participant.refresh_from_db()
            return participant

    logger.warning("Contest streak for user %s in contest %s kept changing; skipped.", user.pk, contest.pk)
    return None


def _advance_global(user, now: datetime, tz) -> Streak:
    streak, created = Streak.objects.get_or_create(
        user=user,
        defaults={
            "current_streak": 1,
            "longest_streak": 1,
            "last_active_at": now,
        },
    )
    if created:
        return streak

    for _ in range(MAX_CAS_ATTEMPTS):
        transition = streak_transition(streak.last_active_at, now, tz)
        if transition == SAME_DAY:
            Streak.objects.filter(pk=streak.pk).update(last_active_at=now)
            streak.refresh_from_db()
            return streak

        new_current = streak.current_streak + 1 if transition == CONTINUED else 1
        updated = Streak.objects.filter(
            pk=streak.pk,
            last_active_at=streak.last_active_at,
        ).update(
            current_streak=new_current,
            longest_streak=max(streak.longest_streak, new_current),
            last_active_at=now,
        )
        streak.refresh_from_db()
        if updated:
            return streak

    logger.warning("Streak for user %s kept changing underneath; giving up this update.", user.pk)
    return streak


def advance_streak(user, now: datetime | None = None, *, contest=None) -> Streak:
    """
    Records that ``user`` finished their problems for the day.

    Same day: only ``last_active_at`` moves. Next day: the streak grows by one.
    Any longer gap (or no record): the streak restarts at 1. Each transition is
    a compare-and-set on ``last_active_at`` so concurrent calls on the same day
    cannot count twice. When ``contest`` is given, the participant's
    per-contest streak runs the same state machine on its own row.
    """
    now = now or timezone.now()
    tz = contest_zone(contest)

    streak = _advance_global(user, now, tz)
    if contest is not None:
        _advance_participant(contest, user, now, tz)
    return streak


def use_streak_freeze(user, now: datetime | None = None) -> Streak:
    """Spends one freeze to keep the streak alive for today, in every contest too."""
    now = now or timezone.now()
    updated = Streak.objects.filter(user=user, freezes_left__gt=0).update(
        freezes_left=F("freezes_left") - 1,
        last_active_at=now,
    )
    if not updated:
        raise NoFreezesLeft()
    ContestParticipant.objects.filter(user=user, last_active_at__isnull=False).update(last_active_at=now)
    return Streak.objects.get(user=user)
