from datetime import datetime, timezone

import pytest

from app.services.ai.time_context import (
    get_time_context,
    get_time_of_day,
    get_timezone_for_country,
)

SATURDAY_AFTERNOON_UTC = datetime(2026, 3, 7, 14, 5, tzinfo=timezone.utc)


def test_context_is_rendered_in_country_timezone():
    context = get_time_context("NG", SATURDAY_AFTERNOON_UTC)

    assert context.timezone == "Africa/Lagos"
    assert context.current_date == "Saturday, March 7, 2026"
    assert context.current_time == "03:05 PM"
    assert context.day_of_week == "Saturday"
    assert context.is_weekend is True
    assert context.time_of_day == "afternoon"
    assert "Day: Saturday (Weekend)" in context.formatted_context
    assert "Timezone: Africa/Lagos" in context.formatted_context


def test_context_crosses_date_line_for_eastern_countries():
    late_utc = datetime(2026, 3, 6, 22, 0, tzinfo=timezone.utc)

    context = get_time_context("JP", late_utc)

    assert context.current_date == "Saturday, March 7, 2026"
    assert context.current_time == "07:00 AM"
    assert context.time_of_day == "morning"


def test_weekday_is_flagged():
    monday = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)

    context = get_time_context("GB", monday)

    assert context.is_weekend is False
    assert "Day: Monday (Weekday)" in context.formatted_context


@pytest.mark.parametrize(
    ("country", "expected"),
    [
        (None, "UTC"),
        ("", "UTC"),
        ("ZZ", "UTC"),
        ("gb", "Europe/London"),
        ("IN", "Asia/Kolkata"),
        ("OTHER", "UTC"),
    ],
)
def test_timezone_lookup(country, expected):
    assert get_timezone_for_country(country) == expected


@pytest.mark.parametrize(
    ("hour", "expected"),
    [
        (4, "night"),
        (5, "morning"),
        (11, "morning"),
        (12, "afternoon"),
        (17, "evening"),
        (20, "evening"),
        (21, "night"),
        (0, "night"),
    ],
)
def test_time_of_day_boundaries(hour, expected):
    assert get_time_of_day(hour) == expected
