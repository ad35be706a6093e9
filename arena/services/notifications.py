import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


class NotificationSender:
    """Contest emails. Callers treat every send as best-effort."""

    def __init__(self, from_email: str | None = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def _send(self, email: str, subject: str, body: str) -> None:
        send_mail(subject, body, self.from_email, [email], fail_silently=False)

    def notify_missed_problem(self, email: str, data: dict) -> None:
        subject = f"Missed problem: {data['problemTitle']}"
        body = (
            f"Hi {data.get('name') or 'there'},\n\n"
            f"The topic \"{data['topicName']}\" in {data['contestName']} has closed and "
            f"\"{data['problemTitle']}\" was not solved in time.\n\n"
            f"You can still practice it here: {data.get('problemUrl') or '-'}\n"
        )
        self._send(email, subject, body)

    def notify_weekend_start(self, email: str, data: dict) -> None:
        subject = f"Weekend test is live - {data['contestName']}"
        lines = [f"- {p['title']} ({p['difficulty']})" for p in data.get('problems', [])]
        body = (
            f"Hi {data.get('name') or 'there'},\n\n"
            f"The weekend test for week {data.get('weekNumber', '-')} has started. "
            f"Solve at least {data.get('threshold', 2)} of these before Sunday midnight:\n\n"
            + "\n".join(lines)
            + f"\n\n{data.get('contestUrl', '')}\n"
        )
        self._send(email, subject, body)

    def notify_weekend_reminder(self, email: str, data: dict) -> None:
        subject = f"Reminder: {data['solvedCount']}/{data['totalProblems']} weekend problems solved"
        lines = [f"- {p['title']} ({p['difficulty']})" for p in data.get('unsolvedProblems', [])]
        body = (
            f"Hi {data.get('name') or 'there'},\n\n"
            f"You have solved {data['solvedCount']} of {data['totalProblems']} weekend problems "
            f"in {data['contestName']}. The window closes at midnight. Still open:\n\n"
            + "\n".join(lines)
            + f"\n\n{data.get('contestUrl', '')}\n"
        )
        self._send(email, subject, body)


def deliver(send, email: str, data: dict) -> bool:
    """Calls one NotificationSender method, logging instead of raising."""
    if not email:
        return False
    try:
        send(email, data)
    except Exception:
        logger.exception("Failed to send %s to %s", getattr(send, "__name__", "notification"), email)
        return False
    return True


def contest_url(contest) -> str:
    base = getattr(settings, "SITE_URL", "").rstrip("/")
    return f"{base}/contest/{contest.pk}"
