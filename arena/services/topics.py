from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from arena.exceptions import ContestNotFound, NoMoreTopics, Unauthorized
from arena.models import Contest, Problem, Streak, Topic, UserProgress
from arena.services.notifications import NotificationSender, deliver

logger = logging.getLogger(__name__)


@dataclass
class AdvanceCheck:
    allowed: bool
    reason: str


def _get_contest(contest_id) -> Contest:
    try:
        return Contest.objects.get(pk=contest_id)
    except Contest.DoesNotExist:
        raise ContestNotFound()


def can_advance(contest_id, requesting_user=None) -> AdvanceCheck:
    """
    Whether the creator may move the contest on. With no active topic the
    first one may start; otherwise every participant must have completed
    every problem of the active topic.
    """
    contest = _get_contest(contest_id)
    current = contest.topics.filter(is_active=True).first()
    if current is None:
        return AdvanceCheck(True, "No active topic - ready to start first topic")

    problem_ids = list(current.problems.values_list("pk", flat=True))
    completed_counts = dict(
        UserProgress.objects.filter(problem_id__in=problem_ids, completed=True)
        .values("user_id")
        .annotate(total=Count("pk"))
        .values_list("user_id", "total")
    )
    blockers = {
        user_id
        for user_id in contest.participants.values_list("user_id", flat=True)
        if completed_counts.get(user_id, 0) < len(problem_ids)
    }
    if not blockers:
        return AdvanceCheck(True, "All participants completed all problems")
    if requesting_user is not None and requesting_user.pk in blockers:
        return AdvanceCheck(False, "You must complete all problems first")
    return AdvanceCheck(False, "Not all participants have completed all problems")


def _start_topic(topic: Topic, now: datetime) -> Topic:
    Topic.objects.filter(pk=topic.pk).update(is_active=True, has_started=True, topic_started_at=now)
    topic.refresh_from_db()
    return topic


def mark_missed_problems(contest: Contest, topic: Topic) -> list[tuple]:
    """
    Flags every problem of ``topic`` a participant has not completed as missed.
    Completed rows are never touched. Returns the (user, problem) pairs flagged.
    """
    problems = list(topic.problems.all())
    missed = []
    for participant in contest.participants.select_related("user"):
        user = participant.user
        completed = set(
            UserProgress.objects.filter(user=user, problem__topic=topic, completed=True)
            .values_list("problem_id", flat=True)
        )
        unsolved = [p for p in problems if p.pk not in completed]
        if not unsolved:
            continue

        UserProgress.objects.bulk_create(
            [UserProgress(user=user, topic=topic, problem=p, is_missed=True) for p in unsolved],
            ignore_conflicts=True,
        )
        UserProgress.objects.filter(user=user, problem__in=unsolved, completed=False).update(is_missed=True)

        flagged = set(
            UserProgress.objects.filter(user=user, problem__in=unsolved, is_missed=True)
            .values_list("problem_id", flat=True)
        )
        missed.extend((user, p) for p in unsolved if p.pk in flagged)
    return missed


def _notify_missed(notifier: NotificationSender, contest: Contest, topic: Topic, missed: list[tuple]) -> None:
    sent = failed = 0
    for user, problem in missed:
        ok = deliver(notifier.notify_missed_problem, user.email, {
            "name": user.get_full_name() or user.username,
            "problemTitle": problem.title,
            "problemUrl": problem.url,
            "topicName": topic.name,
            "contestName": contest.name,
        })
        if ok:
            sent += 1
        else:
            failed += 1
    logger.info("Missed-problem notifications for topic %s: %s sent, %s failed.", topic.pk, sent, failed)


def advance_topic(
    contest_id,
    actor=None,
    *,
    notifier: NotificationSender | None = None,
    now: datetime | None = None,
) -> Topic:
    """
    Closes the active topic and starts the next one by ``order_index``.

    With no active topic the first unfinished topic is started. Closing marks
    every participant's unsolved problems as missed; the emails for those go
    out after commit and never fail the call. ``NoMoreTopics`` is raised
    before anything changes when there is nothing to start.
    """
    now = now or timezone.now()
    notifier = notifier or NotificationSender()

    with transaction.atomic():
        contest = Contest.objects.select_for_update().filter(pk=contest_id).first()
        if contest is None:
            raise ContestNotFound()
        if actor is not None and contest.creator_id != actor.pk:
            raise Unauthorized()

        remaining = contest.topics.filter(topic_completed_at__isnull=True).order_by("order_index")
        current = contest.topics.filter(is_active=True).first()
        if current is None:
            first = remaining.first()
            if first is None:
                raise NoMoreTopics()
            logger.info("Starting first topic %s of contest %s.", first.pk, contest.pk)
            return _start_topic(first, now)

        successor = remaining.filter(order_index__gt=current.order_index).first()
        if successor is None:
            raise NoMoreTopics()

        missed = mark_missed_problems(contest, current)
        Topic.objects.filter(pk=current.pk).update(is_active=False, topic_completed_at=now)
        _start_topic(successor, now)
        transaction.on_commit(lambda: _notify_missed(notifier, contest, current, missed))

    logger.info(
        "Contest %s moved from topic %s to %s; %s problems marked missed.",
        contest.pk,
        current.pk,
        successor.pk,
        len(missed),
    )
    return successor


def topic_progress(user, topic: Topic) -> dict:
    total = Problem.objects.filter(topic=topic).count()
    rows = UserProgress.objects.filter(user=user, topic=topic)
    completed = rows.filter(completed=True).count()
    missed = rows.filter(is_missed=True).count()
    return {
        "total": total,
        "completed": completed,
        "missed": missed,
        "percentage": (completed / total) * 100 if total else 0,
    }


def progress_stats(user) -> dict:
    """Solved totals for a user: overall, per difficulty, per topic, plus the global streak."""
    solved = UserProgress.objects.filter(user=user, completed=True)
    by_difficulty = dict(
        solved.values("problem__difficulty")
        .annotate(total=Count("pk"))
        .values_list("problem__difficulty", "total")
    )
    by_topic = [
        {"topic_id": row["topic_id"], "topic_name": row["topic__name"], "count": row["total"]}
        for row in solved.values("topic_id", "topic__name").annotate(total=Count("pk")).order_by("topic_id")
    ]
    streak = Streak.objects.filter(user=user).first()
    return {
        "total_solved": solved.count(),
        "by_difficulty": by_difficulty,
        "by_topic": by_topic,
        "current_streak": streak.current_streak if streak else 0,
        "longest_streak": streak.longest_streak if streak else 0,
    }


def recent_activity(user, limit: int = 10) -> list[UserProgress]:
    return list(
        UserProgress.objects.filter(user=user, completed=True)
        .select_related("problem", "topic")
        .order_by("-completed_at")[:limit]
    )
