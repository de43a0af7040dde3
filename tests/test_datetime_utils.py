from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.committee_shifts.committee_shifts.committees.model import CommitteeShiftConfig
from src.committee_shifts.committee_shifts.common.datetime_utils import (
    hhmm_to_minutes,
    minute_of_day,
    now_local,
    parse_hhmm,
    parse_month,
)
from src.committee_shifts.committee_shifts.core.enums import ShiftKind


def test_hhmm_parsing():
    assert parse_hhmm("09:05") == time(9, 5)
    assert parse_hhmm("14:00:00") == time(14, 0)
    assert hhmm_to_minutes("13:00") == 780
    assert minute_of_day(datetime(2026, 3, 2, 13, 0, 59)) == 780


def test_bad_time_string():
    with pytest.raises(ValueError):
        parse_hhmm("nine")


def test_parse_month():
    assert parse_month("2026-02") == date(2026, 2, 1)


def test_now_local_is_naive():
    assert now_local().tzinfo is None


def test_committee_windows():
    c = CommitteeShiftConfig(committee_id=1, name="x", morning_start="08:30", afternoon_end="17:45")

    assert c.shift_window(ShiftKind.MORNING) == (510, 780)
    assert c.shift_window(ShiftKind.AFTERNOON) == (840, 1065)
    assert c.shift_window(ShiftKind.FULL_DAY) == (510, 1065)
    assert c.shift_start(ShiftKind.AFTERNOON) == time(14, 0)


def test_empty_committee_times_fall_back_to_defaults():
    c = CommitteeShiftConfig(committee_id=1, name="x", morning_start="", morning_end="")

    assert c.shift_bounds(ShiftKind.MORNING) == ("09:00", "13:00")
