# ABOUTME: Date placeholders for file name formats and template files.
# ABOUTME: Formats datetimes with Moment-style tokens (YYYY-MM-DD, HH:mm, ...) and applies offsets.

import re
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

DEFAULT_DATE_FORMAT = "YYYY-MM-DD"

_DATE_RE = re.compile(r"\{\{DATE(\+-?[0-9]+)?\}\}")
_DATE_FORMATTED_RE = re.compile(r"\{\{DATE:([^}\n\r+]*)(\+-?[0-9]+)?\}\}")
_NUMBER_RE = re.compile(r"^-?[0-9]*$")

_TEMPLATE_DATE_RE = re.compile(
    r"\{\{\s*(date|time)\s*(([+-]\d+)([yqmwdhs]))?\s*(:.+?)?\}\}",
    re.IGNORECASE,
)

_TOKEN_RE = re.compile(
    r"\[([^\]]*)\]"
    r"|YYYY|YY|Q|MMMM|MMM|MM|M|Do|DDDD|DDD|DD|D|dddd|ddd|dd|d"
    r"|HH|H|hh|h|mm|m|ss|s|A|a|X|x"
)

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _twelve_hour(hour: int) -> int:
    return hour % 12 or 12


def _token_value(token: str, dt: datetime) -> str:
    weekday = (dt.weekday() + 1) % 7
    day_of_year = dt.timetuple().tm_yday
    values = {
        "YYYY": lambda: f"{dt.year:04d}",
        "YY": lambda: f"{dt.year % 100:02d}",
        "Q": lambda: str((dt.month - 1) // 3 + 1),
        "MMMM": lambda: _MONTHS[dt.month - 1],
        "MMM": lambda: _MONTHS[dt.month - 1][:3],
        "MM": lambda: f"{dt.month:02d}",
        "M": lambda: str(dt.month),
        "Do": lambda: _ordinal(dt.day),
        "DDDD": lambda: f"{day_of_year:03d}",
        "DDD": lambda: str(day_of_year),
        "DD": lambda: f"{dt.day:02d}",
        "D": lambda: str(dt.day),
        "dddd": lambda: _WEEKDAYS[weekday],
        "ddd": lambda: _WEEKDAYS[weekday][:3],
        "dd": lambda: _WEEKDAYS[weekday][:2],
        "d": lambda: str(weekday),
        "HH": lambda: f"{dt.hour:02d}",
        "H": lambda: str(dt.hour),
        "hh": lambda: f"{_twelve_hour(dt.hour):02d}",
        "h": lambda: str(_twelve_hour(dt.hour)),
        "mm": lambda: f"{dt.minute:02d}",
        "m": lambda: str(dt.minute),
        "ss": lambda: f"{dt.second:02d}",
        "s": lambda: str(dt.second),
        "A": lambda: "AM" if dt.hour < 12 else "PM",
        "a": lambda: "am" if dt.hour < 12 else "pm",
        "X": lambda: str(int(dt.timestamp())),
        "x": lambda: str(int(dt.timestamp() * 1000)),
    }
    return values[token]()


def format_moment(dt: datetime, fmt: str) -> str:
    """Format dt with Moment-style tokens; text in [brackets] is literal."""

    def substitute(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            return match.group(1)
        return _token_value(match.group(0), dt)

    return _TOKEN_RE.sub(substitute, fmt)


def _day_offset(raw: str | None) -> int:
    if not raw:
        return 0
    text = raw.replace("+", "", 1).strip()
    if text in ("", "-") or not _NUMBER_RE.match(text):
        return 0
    return int(text)


def replace_date_in_string(text: str, now: datetime | None = None) -> str:
    """Resolve {{DATE}}, {{DATE+N}} and {{DATE:format+N}} with N in days."""
    current = now or datetime.now()

    def plain(match: re.Match[str]) -> str:
        moment = current + timedelta(days=_day_offset(match.group(1)))
        return format_moment(moment, DEFAULT_DATE_FORMAT)

    def formatted(match: re.Match[str]) -> str:
        moment = current + timedelta(days=_day_offset(match.group(2)))
        return format_moment(moment, match.group(1) or DEFAULT_DATE_FORMAT)

    return _DATE_FORMATTED_RE.sub(formatted, _DATE_RE.sub(plain, text))


def _shift(dt: datetime, amount: int, unit: str) -> datetime:
    # Moment units: upper-case M is months, lower-case m is minutes.
    if unit == "M":
        return dt + relativedelta(months=amount)
    unit = unit.lower()
    if unit == "y":
        return dt + relativedelta(years=amount)
    if unit == "q":
        return dt + relativedelta(months=3 * amount)
    if unit == "w":
        return dt + relativedelta(weeks=amount)
    if unit == "d":
        return dt + relativedelta(days=amount)
    if unit == "h":
        return dt + relativedelta(hours=amount)
    if unit == "m":
        return dt + relativedelta(minutes=amount)
    return dt + relativedelta(seconds=amount)


def apply_template_transformations(text: str, now: datetime | None = None) -> str:
    """Resolve {{date}} and {{time}} placeholders of a template file.

    Both accept an optional offset such as +1d or -2w and a trailing
    :format, e.g. {{date+1w:dddd, MMMM Do}}. Without a format the date is
    written as YYYY-MM-DD.
    """
    current = now or datetime.now()

    def substitute(match: re.Match[str]) -> str:
        moment = current
        if match.group(2):
            moment = _shift(moment, int(match.group(3)), match.group(4))
        fmt = match.group(5)
        if fmt:
            return format_moment(moment, fmt[1:].strip())
        return format_moment(moment, DEFAULT_DATE_FORMAT)

    return _TEMPLATE_DATE_RE.sub(substitute, text)
