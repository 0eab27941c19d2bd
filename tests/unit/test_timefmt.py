"""
Unit tests for countdown and timestamp formatting.
"""

import pytest

from crlottery.utils.timefmt import (
    format_absolute_time,
    format_duration,
    friendly_countdown,
    relative_time,
)

NOW = 1_700_000_000


class TestFormatDuration:

    @pytest.mark.parametrize("seconds, text", [
        (0, "0 seconds"),
        (1, "1 second"),
        (45, "45 seconds"),
        (90, "1 minute"),
        (3600, "1 hour"),
        (3660, "1 hour 1 minute"),
        (7200, "2 hours"),
        (86400, "1 day"),
        (90000, "1 day 1 hour"),
        (-5, "0 seconds"),
    ])
    def test_durations(self, seconds, text):
        assert format_duration(seconds) == text

    def test_hide_seconds(self):
        assert format_duration(45, show_seconds=False) == "Less than a minute"


class TestFriendlyCountdown:

    def test_ended(self):
        assert friendly_countdown(NOW, NOW) == "Ended"
        assert friendly_countdown(NOW - 10, NOW) == "Ended"

    def test_near(self):
        assert friendly_countdown(NOW + 3600, NOW) == "1 hour"

    def test_far_shows_date(self):
        target = NOW + 8 * 86400
        assert friendly_countdown(target, NOW) == format_absolute_time(target)


class TestAbsoluteAndRelative:

    def test_epoch(self):
        assert format_absolute_time(0) == "Jan 1, 1970, 12:00 AM UTC"

    def test_evening(self):
        # 2023-11-14 22:13:20 UTC
        assert format_absolute_time(NOW) == "Nov 14, 2023, 10:13 PM UTC"

    @pytest.mark.parametrize("offset, text", [
        (10, "in a few seconds"),
        (-10, "just now"),
        (7200, "in 2 hours"),
        (-300, "5 minutes ago"),
        (-2 * 86400, "2 days ago"),
    ])
    def test_relative(self, offset, text):
        assert relative_time(NOW + offset, NOW) == text

    def test_relative_far(self):
        assert relative_time(NOW + 30 * 86400, NOW) == format_absolute_time(NOW + 30 * 86400)
