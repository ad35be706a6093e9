import logging
import re
from datetime import datetime, timezone
from typing import Any

import requests
from django.conf import settings

from arena.exceptions import JudgeUnavailable

logger = logging.getLogger(__name__)

RECENT_AC_QUERY = """
query recentAcSubmissions($username: String!, $limit: Int!) {
  recentAcSubmissionList(username: $username, limit: $limit) {
    id
    title
    titleSlug
    timestamp
  }
}
"""


def slugify_title(title: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", (title or "").lower()).strip()
    return re.sub(r"\s+", "-", slug)


class LeetCodeClient:
    """
    Reads a user's recent accepted submissions from the LeetCode GraphQL API.

    Unknown usernames read as "no submissions". Timeouts, connection errors,
    non-2xx answers and unparseable payloads all surface as ``JudgeUnavailable``.
    """

    def __init__(self, url: str | None = None, timeout: float | None = None, session=None):
        self.url = url or getattr(settings, "LEETCODE_GRAPHQL_URL", "https://leetcode.com/graphql")
        self.timeout = timeout or getattr(settings, "LEETCODE_TIMEOUT_SECONDS", 10)
        self.session = session or requests.Session()

    def _request(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self.session.post(
                self.url,
                json={"query": query, "variables": variables},
                headers={"Content-Type": "application/json", "Referer": "https://leetcode.com"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("LeetCode request failed: %s", exc)
            raise JudgeUnavailable() from exc

        if response.status_code < 200 or response.status_code >= 300:
            logger.warning("LeetCode answered with HTTP %s", response.status_code)
            raise JudgeUnavailable(f"LeetCode answered with HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise JudgeUnavailable("LeetCode returned an unreadable response") from exc

    def get_recent_accepted(self, username: str, limit: int | None = None) -> list[dict[str, Any]]:
        if not username:
            return []
        limit = limit or getattr(settings, "LEETCODE_RECENT_AC_LIMIT", 20)

        payload = self._request(RECENT_AC_QUERY, {"username": username, "limit": limit})
        data = payload.get("data") or {}
        raw_subs = data.get("recentAcSubmissionList")
        if raw_subs is None:
            errors = payload.get("errors") or []
            if errors:
                logger.warning(f"LeetCode user lookup failed for {username}: {errors[0].get('message', '')}")
                return []
            raise JudgeUnavailable("LeetCode response had no submission list")

        submissions = []
        for sub in raw_subs:
            timestamp = None
            if sub.get("timestamp"):
                timestamp = datetime.fromtimestamp(int(sub["timestamp"]), tz=timezone.utc)
            submissions.append({
                "title": sub.get("title") or "",
                "slug": sub.get("titleSlug") or "",
                "timestamp": timestamp,
            })
        return submissions

    def check_solved(self, username: str, title: str, slug: str | None = None) -> bool:
        """
        True when the problem appears in the user's last accepted submissions,
        matched by slug or, failing that, by case-insensitive title.
        Older solves fall outside the lookback and read as unsolved.
        """
        problem_slug = slug or slugify_title(title)
        wanted_title = (title or "").strip().lower()
        for sub in self.get_recent_accepted(username):
            if sub["slug"] == problem_slug:
                return True
            if wanted_title and sub["title"].strip().lower() == wanted_title:
                return True
        return False
