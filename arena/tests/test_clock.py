from datetime import date
from types import SimpleNamespace

from django.test import SimpleTestCase, override_settings

from arena.services.clock import (
    contest_zone,
    days_between,
    is_weekend,
    previous_weekend_window,
    weekend_window,
)
from arena.tests.helpers import IST, ist


class ClockTests(SimpleTestCase):
    def test_contest_zone_falls_back_to_setting(self):
        with override_settings(CONTEST_TIME_ZONE="Europe/Lisbon"):
            self.assertEqual(str(contest_zone()), "Europe/Lisbon")
            self.assertEqual(str(contest_zone(SimpleNamespace(time_zone=""))), "Europe/Lisbon")
        self.assertEqual(str(contest_zone(SimpleNamespace(time_zone="UTC"))), "UTC")

    def test_days_between_ignores_time_of_day(self):
        self.assertEqual(days_between(ist(2024, 1, 1, 23, 59), ist(2024, 1, 2, 0, 1), IST), 1)
        self.assertEqual(days_between(ist(2024, 1, 1, 0, 1), ist(2024, 1, 1, 23, 59), IST), 0)

    def test_weekend_window_covers_saturday_and_sunday(self):
        start, end = weekend_window(ist(2024, 1, 7, 22), IST)
        self.assertEqual(start, ist(2024, 1, 6, 0))
        self.assertEqual(end.date(), date(2024, 1, 7))
        self.assertEqual((end.hour, end.minute, end.second), (23, 59, 59))

        self.assertIsNone(weekend_window(ist(2024, 1, 5, 23, 59), IST))
        self.assertTrue(is_weekend(ist(2024, 1, 6, 0), IST))
        self.assertFalse(is_weekend(ist(2024, 1, 8, 0), IST))

    def test_previous_weekend_window_is_the_last_finished_one(self):
        monday_window = previous_weekend_window(ist(2024, 1, 8, 0, 30), IST)
        self.assertEqual(monday_window[0], ist(2024, 1, 6, 0))

        sunday_window = previous_weekend_window(ist(2024, 1, 7, 12), IST)
        self.assertEqual(sunday_window[0], ist(2023, 12, 30, 0))
