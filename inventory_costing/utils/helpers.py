# utils/helpers.py
from datetime import date, datetime, timezone
import logging
from typing import Union, Optional

from ..constants import DATE_FORMAT

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_iso_date(value) -> Optional[date]:
    """
    Parse a stored 'YYYY-MM-DD' string into a date.

    Returns None for anything that does not parse (None, blanks, 'not-a-date',
    impossible days such as 2024-02-30). Callers treat None as "outside every
    month window".
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        return None


def fmt_money(v: NumberLike, places: int = 2) -> str:
    """Thousands separators and a fixed number of decimals; unparseable input is returned as text."""
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        return str(v)
    return f"{x:,.{places}f}"
