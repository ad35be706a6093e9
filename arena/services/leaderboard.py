from dataclasses import dataclass
from datetime import datetime

from django.db.models import Count
from django.utils import timezone

from arena.models import Contest, ContestParticipant, Streak, Topic, UserProgress
from arena.services.clock import contest_zone, previous_weekend_window, weekend_window
from arena.services.weekend import weekend_test_for


@dataclass
class LeaderboardRow:
    participant: ContestParticipant
    rank: int
    weekend_solved: int
    total_solved: int
    current_streak: int
    longest_streak: int
    points: int


def _solved_counts(qs) -> dict[int, int]:
    return dict(qs.values("user_id").annotate(total=Count("pk")).values_list("user_id", "total"))


def contest_leaderboard(contest: Contest, now: datetime | None = None) -> list[LeaderboardRow]:
    """
    Visible participants ranked by weekend-test problems solved in the current
    (or last finished) weekend window, then current streak, then points.
    """
    now = now or timezone.now()
    tz = contest_zone(contest)
    window = weekend_window(now, tz) or previous_weekend_window(now, tz)
    test = weekend_test_for(contest, window)
    weekend_ids = [p.pk for p in test.problems.all()] if test else []

    participants = list(
        contest.participants.filter(is_visible=True).select_related("user")
    )
    user_ids = [p.user_id for p in participants]
    solved = UserProgress.objects.filter(
        user_id__in=user_ids,
        problem__topic__contest=contest,
        completed=True,
    )
    total_counts = _solved_counts(solved)
    weekend_counts = {}
    if weekend_ids:
        weekend_counts = _solved_counts(
            solved.filter(
                problem_id__in=weekend_ids,
                completed_at__gte=window[0],
                completed_at__lte=window[1],
            )
        )
    streaks = {s.user_id: s for s in Streak.objects.filter(user_id__in=user_ids)}

    rows = []
    for participant in participants:
        streak = streaks.get(participant.user_id)
        rows.append(LeaderboardRow(
            participant=participant,
            rank=0,
            weekend_solved=weekend_counts.get(participant.user_id, 0),
            total_solved=total_counts.get(participant.user_id, 0),
            current_streak=streak.current_streak if streak else 0,
            longest_streak=streak.longest_streak if streak else 0,
            points=participant.points,
        ))

    rows.sort(key=lambda r: (
        -r.weekend_solved,
        -r.current_streak,
        -r.points,
        r.participant.user.username,
    ))
    for i, row in enumerate(rows, start=1):
        row.rank = i
    return rows


def topic_leaderboard(topic: Topic) -> list[dict]:
    visible_ids = ContestParticipant.objects.filter(
        contest_id=topic.contest_id,
        is_visible=True,
    ).values_list("user_id", flat=True)
    rows = (
        UserProgress.objects.filter(topic=topic, completed=True, user_id__in=visible_ids)
        .values("user_id", "user__username")
        .annotate(solved=Count("pk"))
        .order_by("-solved", "user__username")
    )
    return [
        {"user_id": row["user_id"], "username": row["user__username"], "solved": row["solved"]}
        for row in rows
    ]
