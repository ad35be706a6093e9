from __future__ import annotations

import logging
from datetime import datetime

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from arena.exceptions import NotSolved, ProblemClosed, ProblemNotFound, Unauthorized
from arena.models import ContestParticipant, Problem, Topic, UserProgress
from arena.services.clock import contest_zone, is_weekend
from arena.services.leetcode_client import LeetCodeClient
from arena.services.streaks import advance_streak
from arena.services.unlocks import completed_problem_ids, get_topic_unlocks
from arena.services.weekend import evaluate_weekend

logger = logging.getLogger(__name__)


def _record_completion(user, problem: Problem, now: datetime) -> tuple[UserProgress, bool]:
    """Upserts the completed row. The bool is True only for the call that completed it."""
    progress, created = UserProgress.objects.get_or_create(
        user=user,
        problem=problem,
        defaults={
            "topic": problem.topic,
            "completed": True,
            "completed_at": now,
            "verified_at": now,
        },
    )
    if created:
        return progress, True

    updated = UserProgress.objects.filter(
        pk=progress.pk,
        completed=False,
        is_missed=False,
    ).update(completed=True, completed_at=now, verified_at=now)
    progress.refresh_from_db()
    if not updated and progress.is_missed:
        raise ProblemClosed()
    return progress, bool(updated)


def _award_first_solve(user, problem: Problem) -> None:
    contest = problem.topic.contest
    points = settings.PROBLEM_POINTS.get(problem.difficulty, 0)
    participants = ContestParticipant.objects.filter(contest=contest, user=user)
    if not participants.update(points=F("points") + points):
        logger.warning("User %s verified problem %s without joining contest %s.", user.pk, problem.pk, contest.pk)
        return
    # Participants stay hidden from leaderboards until their first verified solve.
    participants.filter(is_visible=False).update(is_visible=True)


def _advance_streak_if_day_done(user, topic: Topic, now: datetime):
    unlocks = get_topic_unlocks(topic, user, now)
    unlocked_ids = {pk for pk, state in unlocks.items() if state.unlocked}
    if not unlocked_ids:
        return None
    if not unlocked_ids <= completed_problem_ids(user, topic):
        return None
    return advance_streak(user, now, contest=topic.contest)


def verify_solution(
    user,
    problem_id: int,
    judge_username: str,
    *,
    judge_client: LeetCodeClient | None = None,
    now: datetime | None = None,
) -> UserProgress:
    """
    Handles one "I solved this" claim.

    The judge is asked first, outside any transaction. A confirmed solve is
    upserted on (user, problem); only the request that flips the row to
    completed awards points, advances the streak and scores the weekend test,
    so retries and concurrent duplicates are no-ops.
    """
    try:
        problem = Problem.objects.select_related("topic__contest").get(pk=problem_id)
    except Problem.DoesNotExist:
        raise ProblemNotFound()

    existing = UserProgress.objects.filter(user=user, problem=problem).first()
    if existing and existing.completed:
        return existing
    if existing and existing.is_missed:
        raise ProblemClosed()

    judge_client = judge_client or LeetCodeClient()
    if not judge_client.check_solved(judge_username, problem.title, problem.title_slug or None):
        raise NotSolved()

    now = now or timezone.now()
    topic = problem.topic
    contest = topic.contest
    with transaction.atomic():
        progress, first_completion = _record_completion(user, problem, now)
        if not first_completion:
            return progress

        _award_first_solve(user, problem)
        _advance_streak_if_day_done(user, topic, now)
        if is_weekend(now, contest_zone(contest)):
            evaluate_weekend(user, contest, now)

    logger.info("User %s verified problem %s (%s).", user.pk, problem.pk, problem.title)
    return progress


def moderate_dispute(actor, user_id: int, problem_id: int, action: str, now: datetime | None = None):
    """
    Creator decision on a contested solve: "approve" marks it completed,
    "reject" deletes the progress row. Returns the row, or None when rejected.
    """
    if action not in ("approve", "reject"):
        raise ValueError(f"Unknown dispute action: {action}")

    progress = (
        UserProgress.objects.select_related("topic__contest", "problem", "user")
        .filter(user_id=user_id, problem_id=problem_id)
        .first()
    )
    if progress is None:
        raise ProblemNotFound("No progress recorded for this problem")
    if progress.topic.contest.creator_id != actor.pk:
        raise Unauthorized()

    if action == "reject":
        progress.delete()
        return None

    now = now or timezone.now()
    with transaction.atomic():
        updated = UserProgress.objects.filter(pk=progress.pk, completed=False).update(
            completed=True,
            completed_at=progress.completed_at or now,
            verified_at=now,
            is_missed=False,
        )
        if updated:
            _award_first_solve(progress.user, progress.problem)
        else:
            UserProgress.objects.filter(pk=progress.pk).update(verified_at=now)
    progress.refresh_from_db()
    return progress
