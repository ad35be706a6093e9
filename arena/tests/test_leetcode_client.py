from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import requests
from django.test import SimpleTestCase

from arena.exceptions import JudgeUnavailable
from arena.services.leetcode_client import LeetCodeClient, slugify_title


def _submissions(*pairs):
    return {
        "data": {
            "recentAcSubmissionList": [
                {"id": str(i), "title": title, "titleSlug": slug, "timestamp": "1704067200"}
                for i, (title, slug) in enumerate(pairs)
            ]
        }
    }


class LeetCodeClientTests(SimpleTestCase):
    def test_timeout_is_judge_unavailable(self):
        session = MagicMock()
        session.post.side_effect = requests.Timeout("slow")
        client = LeetCodeClient(session=session, timeout=3)

        with self.assertRaises(JudgeUnavailable):
            client.check_solved("alice", "Two Sum")
        self.assertEqual(session.post.call_args.kwargs["timeout"], 3)

    def test_non_2xx_is_judge_unavailable(self):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=503)
        with self.assertRaises(JudgeUnavailable):
            LeetCodeClient(session=session).get_recent_accepted("alice")

    def test_unreadable_body_is_judge_unavailable(self):
        response = MagicMock(status_code=200)
        response.json.side_effect = ValueError("not json")
        session = MagicMock()
        session.post.return_value = response
        with self.assertRaises(JudgeUnavailable):
            LeetCodeClient(session=session).get_recent_accepted("alice")

    def test_unknown_user_reads_as_no_submissions(self):
        payload = {"data": {"recentAcSubmissionList": None}, "errors": [{"message": "user does not exist"}]}
        with patch.object(LeetCodeClient, "_request", return_value=payload):
            client = LeetCodeClient(session=MagicMock())
            self.assertEqual(client.get_recent_accepted("ghost"), [])
            self.assertFalse(client.check_solved("ghost", "Two Sum"))

    def test_missing_list_without_errors_is_unavailable(self):
        with patch.object(LeetCodeClient, "_request", return_value={"data": None}):
            with self.assertRaises(JudgeUnavailable):
                LeetCodeClient(session=MagicMock()).get_recent_accepted("alice")

    def test_parses_submissions(self):
        with patch.object(LeetCodeClient, "_request", return_value=_submissions(("Two Sum", "two-sum"))) as request_mock:
            subs = LeetCodeClient(session=MagicMock()).get_recent_accepted("alice", limit=5)

        self.assertEqual(subs, [{
            "title": "Two Sum",
            "slug": "two-sum",
            "timestamp": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }])
        self.assertEqual(request_mock.call_args.args[1], {"username": "alice", "limit": 5})

    def test_matches_by_slug_or_title(self):
        payload = _submissions(("Valid Anagram", "valid-anagram"), ("Contains Duplicate", "something-else"))
        with patch.object(LeetCodeClient, "_request", return_value=payload):
            client = LeetCodeClient(session=MagicMock())
            self.assertTrue(client.check_solved("alice", "Valid Anagram"))
            self.assertTrue(client.check_solved("alice", "contains duplicate "))
            self.assertTrue(client.check_solved("alice", "Renamed", slug="valid-anagram"))
            self.assertFalse(client.check_solved("alice", "Two Sum"))

    def test_empty_username_skips_the_request(self):
        session = MagicMock()
        self.assertEqual(LeetCodeClient(session=session).get_recent_accepted(""), [])
        session.post.assert_not_called()

    def test_slugify_title(self):
        self.assertEqual(slugify_title("Best Time to Buy and Sell Stock II"), "best-time-to-buy-and-sell-stock-ii")
        self.assertEqual(slugify_title("Pow(x, n)"), "powx-n")
