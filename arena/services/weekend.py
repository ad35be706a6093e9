from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from arena.models import Contest, ContestParticipant, UserProgress, WeekendTest
from arena.services.clock import (
    MONDAY,
    contest_zone,
    days_between,
    local_date,
    previous_weekend_window,
    weekend_window,
)
from arena.services.notifications import NotificationSender, contest_url, deliver

logger = logging.getLogger(__name__)


@dataclass
class WeekendResult:
    solved: int
    total: int
    passed: bool


def pass_threshold() -> int:
    return getattr(settings, "WEEKEND_PASS_THRESHOLD", 2)


def week_number(contest: Contest, now: datetime) -> int:
    return max(0, days_between(contest.start_date, now, contest_zone(contest))) // 7 + 1


def weekend_test_for(contest: Contest, window: tuple[datetime, datetime]) -> WeekendTest | None:
    saturday = window[0].date()
    return (
        WeekendTest.objects.filter(contest=contest, starts_on=saturday)
        .prefetch_related("problems")
        .first()
    )


def solved_in_window(user, problem_ids, window: tuple[datetime, datetime]) -> set[int]:
    start, end = window
    return set(
        UserProgress.objects.filter(
            user=user,
            problem_id__in=problem_ids,
            completed=True,
            completed_at__gte=start,
            completed_at__lte=end,
        ).values_list("problem_id", flat=True)
    )


def evaluate_weekend(user, contest: Contest, now: datetime | None = None) -> WeekendResult | None:
    """
    Re-scores the current weekend test for ``user`` after a weekend solve.

    Returns None outside a weekend window or when the contest has no weekend
    test for this window; the participant is left untouched in that case.
    """
    now = now or timezone.now()
    tz = contest_zone(contest)
    window = weekend_window(now, tz)
    if window is None:
        return None

    test = weekend_test_for(contest, window)
    if test is None:
        logger.info("No weekend test for contest %s on %s", contest.pk, window[0].date())
        return None
    problem_ids = [p.pk for p in test.problems.all()]
    if not problem_ids:
        return None

    solved = len(solved_in_window(user, problem_ids, window))
    passed = solved >= pass_threshold()
    updated = ContestParticipant.objects.filter(contest=contest, user=user).update(
        last_weekend_attempt=now,
        last_weekend_success=passed,
    )
    if not updated:
        logger.warning("User %s solved a weekend problem in contest %s without joining it.", user.pk, contest.pk)
    return WeekendResult(solved=solved, total=len(problem_ids), passed=passed)


def _settled_recently(participant: ContestParticipant, now: datetime, tz) -> bool:
    if participant.last_payment_date is None:
        return False
    guard_days = getattr(settings, "PENALTY_GUARD_DAYS", 7)
    return local_date(participant.last_payment_date, tz) > local_date(now, tz) - timedelta(days=guard_days)


def _settle_participant(
    participant: ContestParticipant,
    window: tuple[datetime, datetime],
    now: datetime,
    no_attempt_policy: str,
) -> str:
    start, end = window
    attempt = participant.last_weekend_attempt
    attempted = attempt is not None and start <= attempt <= end
    if attempted:
        passed = participant.last_weekend_success
    elif no_attempt_policy == "fail":
        passed = False
    else:
        return "silent"

    if passed:
        changes = {
            "current_streak": F("current_streak") + 1,
            "needs_payment": False,
            "has_paid": True,
        }
        outcome = "carried"
    else:
        changes = {
            "current_streak": 0,
            "needs_payment": True,
            "has_paid": False,
        }
        outcome = "charged"

    # Guarded on the stamp we read so an overlapping sweep cannot apply it twice.
    updated = ContestParticipant.objects.filter(
        pk=participant.pk,
        last_payment_date=participant.last_payment_date,
    ).update(last_payment_date=now, **changes)
    return outcome if updated else "skipped"


def check_weekend_penalties(now: datetime | None = None) -> dict:
    """
    Monday settlement of the weekend that just ended.

    Failed attempts owe the contest penalty and lose their contest streak;
    passed attempts carry over with the streak extended. Participants already
    settled within ``PENALTY_GUARD_DAYS`` are skipped, so re-running the sweep
    is harmless. One participant failing never stops the others.
    """
    now = now or timezone.now()
    policy = getattr(settings, "WEEKEND_NO_ATTEMPT_POLICY", "skip")
    summary = {
        "contests": 0,
        "not_monday": 0,
        "charged": 0,
        "carried": 0,
        "silent": 0,
        "skipped": 0,
        "errors": 0,
    }

    for contest in Contest.objects.filter(is_active=True):
        tz = contest_zone(contest)
        if local_date(now, tz).weekday() != MONDAY:
            summary["not_monday"] += 1
            continue
        summary["contests"] += 1
        window = previous_weekend_window(now, tz)

        for participant in contest.participants.select_related("user"):
            if _settled_recently(participant, now, tz):
                summary["skipped"] += 1
                continue
            try:
                with transaction.atomic():
                    outcome = _settle_participant(participant, window, now, policy)
                summary[outcome] += 1
            except Exception:
                logger.exception(
                    "Weekend penalty check failed for participant %s in contest %s",
                    participant.pk,
                    contest.pk,
                )
                summary["errors"] += 1

    logger.info("Weekend penalty sweep finished: %s", summary)
    return summary


def settle_penalty(contest: Contest, user, now: datetime | None = None) -> ContestParticipant:
    """Marks an owed weekend penalty as paid. Capturing the payment happens elsewhere."""
    participant = ContestParticipant.objects.get(contest=contest, user=user)
    ContestParticipant.objects.filter(pk=participant.pk, needs_payment=True).update(
        needs_payment=False,
        has_paid=True,
    )
    participant.refresh_from_db()
    return participant


def _in_good_standing(participant: ContestParticipant) -> bool:
    return not (participant.needs_payment and not participant.has_paid)


def _weekend_contests(now: datetime):
    for contest in Contest.objects.filter(is_active=True, start_date__lte=now):
        window = weekend_window(now, contest_zone(contest))
        if window is None:
            continue
        test = weekend_test_for(contest, window)
        if test is None:
            logger.info("No weekend test for contest %s, week %s", contest.pk, week_number(contest, now))
            continue
        yield contest, window, test


def notify_weekend_start(now: datetime | None = None, notifier: NotificationSender | None = None) -> dict:
    now = now or timezone.now()
    notifier = notifier or NotificationSender()
    summary = {"sent": 0, "failed": 0}

    for contest, _window, test in _weekend_contests(now):
        problems = [{"title": p.title, "difficulty": p.difficulty} for p in test.problems.all()]
        for participant in contest.participants.select_related("user"):
            if not _in_good_standing(participant):
                continue
            user = participant.user
            ok = deliver(notifier.notify_weekend_start, user.email, {
                "name": user.get_full_name() or user.username,
                "contestName": contest.name,
                "weekNumber": week_number(contest, now),
                "problems": problems,
                "threshold": pass_threshold(),
                "contestUrl": contest_url(contest),
            })
            summary["sent" if ok else "failed"] += 1

    logger.info("Weekend start notifications: %s", summary)
    return summary


def notify_weekend_reminder(now: datetime | None = None, notifier: NotificationSender | None = None) -> dict:
    """Reminds participants still below the pass threshold before the window closes."""
    now = now or timezone.now()
    notifier = notifier or NotificationSender()
    threshold = pass_threshold()
    summary = {"sent": 0, "failed": 0, "on_track": 0}

    for contest, window, test in _weekend_contests(now):
        problems = list(test.problems.all())
        problem_ids = [p.pk for p in problems]
        for participant in contest.participants.select_related("user"):
            if not _in_good_standing(participant):
                continue
            solved = solved_in_window(participant.user, problem_ids, window)
            if len(solved) >= threshold:
                summary["on_track"] += 1
                continue
            user = participant.user
            ok = deliver(notifier.notify_weekend_reminder, user.email, {
                "name": user.get_full_name() or user.username,
                "contestName": contest.name,
                "weekNumber": week_number(contest, now),
                "solvedCount": len(solved),
                "totalProblems": len(problems),
                "unsolvedProblems": [
                    {"title": p.title, "difficulty": p.difficulty}
                    for p in problems
                    if p.pk not in solved
                ],
                "contestUrl": contest_url(contest),
            })
            summary["sent" if ok else "failed"] += 1

    logger.info("Weekend reminder notifications: %s", summary)
    return summary
