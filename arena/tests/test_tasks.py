import json
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase, override_settings

from arena import tasks


class RunLockedTests(SimpleTestCase):
    def test_runs_and_records_health(self):
        client = MagicMock()
        client.set.return_value = True
        func = MagicMock(return_value={"charged": 1})

        with patch("arena.tasks._get_redis_client", return_value=client):
            result = tasks._run_locked("check_weekend_penalties", func)

        self.assertEqual(result, {"charged": 1})
        func.assert_called_once_with()
        client.delete.assert_called_once_with("arena:lock:check_weekend_penalties")
        health_call = client.set.call_args_list[-1]
        self.assertEqual(health_call.args[0], "arena:health:check_weekend_penalties")
        self.assertEqual(json.loads(health_call.args[1])["summary"], {"charged": 1})
        self.assertEqual(health_call.kwargs["ex"], 8 * 24 * 3600)

    def test_skips_when_lock_is_held(self):
        client = MagicMock()
        client.set.return_value = None
        func = MagicMock()

        with patch("arena.tasks._get_redis_client", return_value=client):
            result = tasks._run_locked("weekend_start_notifications", func)

        self.assertEqual(result, {"status": "locked"})
        func.assert_not_called()
        client.delete.assert_not_called()

    @override_settings(TASK_KEY_PREFIX="staging", SWEEP_LOCK_SECONDS=30, TASK_HEALTH_TTL_SECONDS=60)
    def test_keys_and_ttls_come_from_settings(self):
        client = MagicMock()
        client.set.return_value = True

        with patch("arena.tasks._get_redis_client", return_value=client):
            tasks._run_locked("weekend_start_notifications", MagicMock(return_value={"sent": 2}))

        lock_call, health_call = client.set.call_args_list
        self.assertEqual(lock_call.args[0], "staging:lock:weekend_start_notifications")
        self.assertEqual(lock_call.kwargs, {"nx": True, "ex": 30})
        self.assertEqual(health_call.args[0], "staging:health:weekend_start_notifications")
        self.assertEqual(health_call.kwargs["ex"], 60)

    def test_runs_without_redis(self):
        func = MagicMock(return_value={"sent": 0, "failed": 0})
        with patch("arena.tasks._get_redis_client", side_effect=ConnectionError("redis down")):
            with self.assertLogs("arena.tasks", level="ERROR"):
                result = tasks._run_locked("weekend_reminder_notifications", func)
        self.assertEqual(result, {"sent": 0, "failed": 0})

    def test_lock_released_when_job_fails(self):
        client = MagicMock()
        client.set.return_value = True
        with patch("arena.tasks._get_redis_client", return_value=client):
            with self.assertRaises(RuntimeError):
                tasks._run_locked("check_weekend_penalties", MagicMock(side_effect=RuntimeError("boom")))
        client.delete.assert_called_once_with("arena:lock:check_weekend_penalties")

    def test_tasks_wrap_services(self):
        with patch("arena.tasks._run_locked", return_value={}) as run_mock:
            tasks.check_weekend_penalties_task()
            tasks.weekend_start_notifications()
            tasks.weekend_reminder_notifications()
        self.assertEqual(
            [call.args[0] for call in run_mock.call_args_list],
            ["check_weekend_penalties", "weekend_start_notifications", "weekend_reminder_notifications"],
        )
        self.assertIs(run_mock.call_args_list[0].args[1], tasks.check_weekend_penalties)
