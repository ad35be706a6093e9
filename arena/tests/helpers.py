from datetime import datetime
from zoneinfo import ZoneInfo

from django.contrib.auth.models import User

from arena.models import Contest, ContestParticipant, Problem, Topic

IST = ZoneInfo("Asia/Kolkata")


def ist(year, month, day, hour=12, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=IST)


def make_user(username, **extra):
    return User.objects.create_user(
        username=username,
        password="testpass",
        email=extra.pop("email", f"{username}@example.com"),
        **extra,
    )


def make_contest(creator, **fields):
    fields.setdefault("name", "Arrays Sprint")
    fields.setdefault("start_date", ist(2024, 1, 1, 0))
    fields.setdefault("time_zone", "Asia/Kolkata")
    return Contest.objects.create(creator=creator, **fields)


def make_topic(contest, order_index=1, started_at=None, **fields):
    fields.setdefault("name", f"Topic {order_index}")
    if started_at is not None:
        fields.update(is_active=True, has_started=True, topic_started_at=started_at)
    return Topic.objects.create(contest=contest, order_index=order_index, **fields)


def make_problems(topic, easy=0, medium=0, hard=0):
    problems = []
    order = 0
    for difficulty, count in ((Problem.EASY, easy), (Problem.MEDIUM, medium), (Problem.HARD, hard)):
        for _ in range(count):
            order += 1
            problems.append(Problem.objects.create(
                topic=topic,
                difficulty=difficulty,
                leetcode_id=str(topic.pk * 100 + order),
                title=f"{topic.name} {difficulty} {order}",
                title_slug=f"t{topic.pk}-{difficulty.lower()}-{order}",
                order_index=order,
            ))
    return problems


def join(contest, user, **fields):
    return ContestParticipant.objects.create(contest=contest, user=user, **fields)
