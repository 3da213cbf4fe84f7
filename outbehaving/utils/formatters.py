"""Display formatting for amounts, dates and percentages (en-GB conventions)"""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from outbehaving.utils.date_utils import DateLike, days_between, to_date, to_datetime

CURRENCY_SYMBOLS = {"GBP": "£", "USD": "$", "EUR": "€"}

Number = Union[int, float, Decimal]


def format_currency(amount: Number, currency: str = "GBP") -> str:
    """
    Format an amount with currency symbol, thousands separators and 2dp.

    Example:
        1234.5 → "£1,234.50"; -5 → "-£5.00"
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    body = f"{abs(value):,.2f}"
    formatted = f"{symbol}{body}" if symbol else f"{currency.upper()} {body}"
    return f"-{formatted}" if value < 0 else formatted


def format_date(value: Optional[DateLike], fmt: str = "%d %b %Y") -> str:
    """Format a date; unparseable or empty input yields an empty string"""
    if value is None:
        return ""
    try:
        parsed = to_datetime(value) if isinstance(value, str) else value
    except ValueError:
        return ""
    return parsed.strftime(fmt)


def format_relative_date(value: DateLike, now: Optional[datetime] = None) -> str:
    """Human distance from now, e.g. "in 3 days" or "about 2 hours ago" """
    try:
        moment = to_datetime(value) if isinstance(value, (str, datetime)) else datetime(
            value.year, value.month, value.day, tzinfo=timezone.utc
        )
    except ValueError:
        return ""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    seconds = (moment - now).total_seconds()
    distance = _describe_distance(abs(seconds))
    return f"in {distance}" if seconds > 0 else f"{distance} ago"


def _describe_distance(seconds: float) -> str:
    minutes = round(seconds / 60)
    if minutes < 1:
        return "less than a minute"
    if minutes < 45:
        return _plural(minutes, "minute")
    hours = round(minutes / 60)
    if hours < 24:
        return "about " + _plural(hours, "hour")
    days = round(hours / 24)
    if days < 30:
        return _plural(days, "day")
    months = round(days / 30)
    if months < 12:
        return _plural(months, "month")
    return "about " + _plural(round(months / 12), "year")


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_percentage(value: Number, decimals: int = 0) -> str:
    return f"{float(value):.{decimals}f}%"


def format_number(value: Number) -> str:
    """Thousands-separated number; fractional digits are kept as given"""
    try:
        decimal_value = Decimal(str(value))
    except InvalidOperation:
        return str(value)
    if decimal_value == decimal_value.to_integral_value():
        return f"{int(decimal_value):,}"
    return f"{decimal_value:,}"


def calculate_days_remaining(due_date: Optional[DateLike], today: Optional[date] = None) -> Optional[int]:
    """
    Whole days until a due date, never negative.

    Returns None when there is no due date or it cannot be parsed.
    """
    try:
        due = to_date(due_date)
    except ValueError:
        return None
    if due is None:
        return None
    today = today or date.today()
    return max(days_between(today, due), 0)
