# utils/validators.py
import re

_PHONE_RX = re.compile(r"^\d{10}$")
_DIGITS_RX = re.compile(r"^\d+$")


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed and value is None.
    """
    if x is None or isinstance(x, bool):
        return False, None
    try:
        val = float(x)
    except (TypeError, ValueError):
        return False, None
    if val != val:  # NaN
        return False, None
    return True, val


def float_or_zero(x) -> float:
    """Lenient parse used at aggregation time: anything unparseable counts as 0."""
    ok, val = try_parse_float(x)
    return val if ok else 0.0


def is_positive_integer(x) -> bool:
    """
    True for ints > 0 and for strings made only of digits with value > 0
    ("12" yes; "1.5", "-3", "" no).
    """
    if isinstance(x, bool):
        return False
    if isinstance(x, int):
        return x > 0
    s = str(x or "").strip()
    return bool(_DIGITS_RX.match(s)) and int(s) > 0


def is_valid_phone(text) -> bool:
    """Exactly ten digits."""
    return bool(text is not None and _PHONE_RX.match(str(text)))
