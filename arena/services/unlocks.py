from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from django.utils import timezone

from arena.models import Problem, Topic, UserProgress
from arena.services.clock import contest_zone, days_between


@dataclass(frozen=True)
class ReleaseRates:
    easy_per_day: int
    medium_per_day: int
    hard_days_per_problem: int

    @classmethod
    def for_contest(cls, contest) -> "ReleaseRates":
        return cls(
            easy_per_day=contest.easy_per_day,
            medium_per_day=contest.medium_per_day,
            hard_days_per_problem=contest.hard_days_per_problem,
        )


@dataclass(frozen=True)
class ProblemUnlock:
    unlocked: bool
    # Schedule day (0 = topic start day) on which the problem's slot opens.
    # None when the tier can never open.
    unlock_day: int | None
    available_today: bool = False


def _gate_days(count: int, per_day: int) -> int | None:
    """Days a tier occupies before the next tier may start; None means never."""
    if count == 0:
        return 0
    if per_day <= 0:
        return None
    return math.ceil(count / per_day)


def _split_by_difficulty(problems: Iterable[Problem]) -> tuple[list, list, list]:
    ordered = sorted(problems, key=lambda p: (p.order_index, p.pk))
    easy = [p for p in ordered if p.difficulty == Problem.EASY]
    medium = [p for p in ordered if p.difficulty == Problem.MEDIUM]
    hard = [p for p in ordered if p.difficulty == Problem.HARD]
    return easy, medium, hard


def _unlock(is_unlocked: bool, unlock_day: int | None, today: int) -> ProblemUnlock:
    return ProblemUnlock(
        unlocked=is_unlocked,
        unlock_day=unlock_day,
        available_today=is_unlocked and unlock_day == today,
    )


def compute_unlocked(
    problems: Iterable[Problem],
    rates: ReleaseRates,
    completed_ids: set[int],
    started_at: datetime | None,
    now: datetime,
    tz,
) -> dict[int, ProblemUnlock]:
    """
    Lock state of every problem in a topic for one user.

    Easy problems release ``easy_per_day`` per day from the start day. Medium
    problems only release once the user has completed every easy problem, and
    hard problems once every easy and medium problem is done; their schedules
    are offset by the days the earlier tiers take to release. Pass
    ``started_at=None`` for a topic that has not started: everything is locked.
    """
    easy, medium, hard = _split_by_difficulty(problems)
    if started_at is None:
        return {p.pk: ProblemUnlock(False, None) for p in easy + medium + hard}

    days = days_between(started_at, now, tz)
    result: dict[int, ProblemUnlock] = {}

    e = rates.easy_per_day
    easy_count = max(0, min(e * (days + 1), len(easy))) if e > 0 else 0
    for i, problem in enumerate(easy):
        unlock_day = i // e if e > 0 else None
        result[problem.pk] = _unlock(i < easy_count, unlock_day, days)

    m = rates.medium_per_day
    easy_gate = _gate_days(len(easy), e)
    medium_open = easy_gate is not None and all(p.pk in completed_ids for p in easy)
    medium_count = 0
    if medium_open and m > 0:
        medium_count = max(0, min(m * (days + 1 - easy_gate), len(medium)))
    for j, problem in enumerate(medium):
        unlock_day = easy_gate + j // m if easy_gate is not None and m > 0 else None
        result[problem.pk] = _unlock(j < medium_count, unlock_day, days)

    h = max(1, rates.hard_days_per_problem)
    medium_gate = _gate_days(len(medium), m)
    hard_open = (
        medium_open
        and medium_gate is not None
        and all(p.pk in completed_ids for p in medium)
    )
    hard_count = 0
    if hard_open:
        days_after_medium = days + 1 - easy_gate - medium_gate
        hard_count = max(0, min(days_after_medium // h, len(hard)))
    for k, problem in enumerate(hard):
        unlock_day = None
        if easy_gate is not None and medium_gate is not None:
            unlock_day = easy_gate + medium_gate + (k + 1) * h - 1
        result[problem.pk] = _unlock(k < hard_count, unlock_day, days)

    return result


def completed_problem_ids(user, topic: Topic) -> set[int]:
    return set(
        UserProgress.objects.filter(
            user=user,
            problem__topic=topic,
            completed=True,
        ).values_list("problem_id", flat=True)
    )


def get_topic_unlocks(topic: Topic, user, now: datetime | None = None) -> dict[int, ProblemUnlock]:
    now = now or timezone.now()
    contest = topic.contest
    started_at = topic.topic_started_at if topic.has_started else None
    return compute_unlocked(
        topic.problems.all(),
        ReleaseRates.for_contest(contest),
        completed_problem_ids(user, topic) if started_at else set(),
        started_at,
        now,
        contest_zone(contest),
    )


def list_topic_problems(topic: Topic, user, now: datetime | None = None) -> list[dict]:
    """Problems of a topic in display order with the user's lock and progress state."""
    unlocks = get_topic_unlocks(topic, user, now)
    progress = {
        row.problem_id: row
        for row in UserProgress.objects.filter(user=user, problem__topic=topic)
    }
    rows = []
    for problem in topic.problems.order_by("order_index", "pk"):
        state = unlocks[problem.pk]
        entry = progress.get(problem.pk)
        rows.append({
            "problem": problem,
            "is_locked": not state.unlocked,
            "unlock_day": state.unlock_day,
            "available_today": state.available_today,
            "completed": bool(entry and entry.completed),
            "is_missed": bool(entry and entry.is_missed),
        })
    return rows
