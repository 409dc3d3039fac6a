"""Tests for the pure rules: hour/day windows, cancellation deadline, ownership."""

from datetime import datetime, timedelta, timezone

import pytest

from meetup_planner_api.app.domain.authorization import assert_owner
from meetup_planner_api.app.domain.cancellation import CANCELLATION_NOTICE, is_cancelable
from meetup_planner_api.app.domain.errors import ForbiddenError
from meetup_planner_api.app.domain.time_window import (
    day_window,
    hour_window,
    is_before,
    subtract_days,
    to_utc,
)

UTC = timezone.utc


class TestTimeWindow:
    def test_hour_window_floors_and_ceils_to_the_hour(self):
        start, end = hour_window(datetime(2030, 5, 1, 14, 30, 15, tzinfo=UTC))
        assert start == datetime(2030, 5, 1, 14, 0, tzinfo=UTC)
        assert end == datetime(2030, 5, 1, 14, 59, 59, 999999, tzinfo=UTC)

    def test_hour_window_on_exact_hour(self):
        start, end = hour_window(datetime(2030, 5, 1, 15, 0, tzinfo=UTC))
        assert start == datetime(2030, 5, 1, 15, 0, tzinfo=UTC)
        assert end < datetime(2030, 5, 1, 16, 0, tzinfo=UTC)

    def test_hour_window_converts_offsets_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        start, _ = hour_window(datetime(2030, 5, 1, 16, 45, tzinfo=plus_two))
        assert start == datetime(2030, 5, 1, 14, 0, tzinfo=UTC)

    def test_day_window(self):
        start, end = day_window(datetime(2030, 5, 1, 23, 59, tzinfo=UTC))
        assert start == datetime(2030, 5, 1, tzinfo=UTC)
        assert end == datetime(2030, 5, 1, 23, 59, 59, 999999, tzinfo=UTC)

    def test_naive_instants_are_utc(self):
        assert to_utc(datetime(2030, 1, 1, 8)) == datetime(2030, 1, 1, 8, tzinfo=UTC)

    def test_is_before_and_subtract_days(self):
        later = datetime(2030, 5, 3, 12, tzinfo=UTC)
        assert subtract_days(later, 2) == datetime(2030, 5, 1, 12, tzinfo=UTC)
        assert is_before(subtract_days(later, 2), later)
        assert not is_before(later, later)


class TestCancellationPolicy:
    scheduled = datetime(2030, 5, 10, 18, 0, tzinfo=UTC)

    def test_notice_is_48_hours(self):
        assert CANCELLATION_NOTICE == timedelta(hours=48)

    def test_cancelable_with_more_than_48_hours_left(self):
        now = self.scheduled - timedelta(hours=48, seconds=1)
        assert is_cancelable(self.scheduled, now)

    def test_not_cancelable_at_exactly_48_hours(self):
        assert not is_cancelable(self.scheduled, self.scheduled - timedelta(hours=48))

    def test_not_cancelable_inside_window(self):
        assert not is_cancelable(self.scheduled, self.scheduled - timedelta(hours=3))


class TestAuthorizationGuard:
    def test_owner_passes(self):
        assert assert_owner(7, 7) is None

    def test_other_user_is_forbidden(self):
        with pytest.raises(ForbiddenError) as exc_info:
            assert_owner(7, 8)
        assert exc_info.value.status_code == 401
