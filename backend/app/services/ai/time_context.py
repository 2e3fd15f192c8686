"""Temporal context injected into prompts so generated dates are realistic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

COUNTRY_TIMEZONES: dict[str, str] = {
    "US": "America/New_York",
    "GB": "Europe/London",
    "CA": "America/Toronto",
    "AU": "Australia/Sydney",
    "NG": "Africa/Lagos",
    "IN": "Asia/Kolkata",
    "ZA": "Africa/Johannesburg",
    "KE": "Africa/Nairobi",
    "GH": "Africa/Accra",
    "UG": "Africa/Kampala",
    "DE": "Europe/Berlin",
    "FR": "Europe/Paris",
    "IT": "Europe/Rome",
    "ES": "Europe/Madrid",
    "NL": "Europe/Amsterdam",
    "SE": "Europe/Stockholm",
    "BR": "America/Sao_Paulo",
    "MX": "America/Mexico_City",
    "AR": "America/Argentina/Buenos_Aires",
    "JP": "Asia/Tokyo",
    "CN": "Asia/Shanghai",
    "SG": "Asia/Singapore",
    "MY": "Asia/Kuala_Lumpur",
    "TH": "Asia/Bangkok",
    "PH": "Asia/Manila",
    "EG": "Africa/Cairo",
    "SA": "Asia/Riyadh",
    "AE": "Asia/Dubai",
    "JO": "Asia/Amman",
    "OTHER": "UTC",
}


@dataclass(frozen=True)
class TimeContext:
    current_date: str
    current_time: str
    timezone: str
    day_of_week: str
    is_weekend: bool
    time_of_day: str
    formatted_context: str


def get_timezone_for_country(country_code: str | None) -> str:
    if not country_code:
        return "UTC"
    return COUNTRY_TIMEZONES.get(country_code.upper(), "UTC")


def get_time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def get_time_context(country_code: str | None, now: datetime) -> TimeContext:
    """Render ``now`` in the country's primary timezone.

    ``now`` must be timezone-aware; callers pass the request time so the
    output stays deterministic under test.
    """
    timezone_name = get_timezone_for_country(country_code)
    local = now.astimezone(ZoneInfo(timezone_name))

    day_of_week = local.strftime("%A")
    current_date = f"{day_of_week}, {local.strftime('%B')} {local.day}, {local.year}"
    current_time = local.strftime("%I:%M %p")
    is_weekend = local.weekday() >= 5
    time_of_day = get_time_of_day(local.hour)

    formatted_context = (
        "\nTEMPORAL CONTEXT:\n"
        f"Current Date: {current_date}\n"
        f"Current Time: {current_time}\n"
        f"Timezone: {timezone_name}\n"
        f"Day: {day_of_week} {'(Weekend)' if is_weekend else '(Weekday)'}\n"
        f"Time of Day: {time_of_day}\n"
        "\n"
        "Use this temporal context for:\n"
        "- Realistic date calculations (LMP, symptom onset, etc.)\n"
        "- Time orientation questions\n"
        "- Appropriate timing for medical history\n"
        "- Contextual responses based on current time\n"
        "- All temporal references should be relative to this current date/time\n"
    )

    return TimeContext(
        current_date=current_date,
        current_time=current_time,
        timezone=timezone_name,
        day_of_week=day_of_week,
        is_weekend=is_weekend,
        time_of_day=time_of_day,
        formatted_context=formatted_context,
    )
