"""Per-type canonicalization of raw cell values."""

import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Callable, Optional, Union

from ..mapping.models import FieldType
from .models import TransformOptions, TransformResult
from .nip import clean_nip, is_valid_nip, TEN_DIGITS

DEFAULT_OPTIONS = TransformOptions()


def _today() -> date:
    """Return the current local date."""
    return date.today()


# (pattern, group order) - group order gives the positions of year, month, day
DATE_PATTERNS: list[tuple[re.Pattern, tuple[int, int, int]]] = [
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$", re.ASCII), (1, 2, 3)),  # YYYY-MM-DD (canonical)
    (re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$", re.ASCII), (3, 2, 1)),  # DD.MM.YYYY
    (re.compile(r"^(\d{2})-(\d{2})-(\d{4})$", re.ASCII), (3, 2, 1)),  # DD-MM-YYYY
    (re.compile(r"^(\d{2})/(\d{2})/(\d{4})$", re.ASCII), (3, 2, 1)),  # DD/MM/YYYY
    (re.compile(r"^(\d{4})\.(\d{2})\.(\d{2})$", re.ASCII), (1, 2, 3)),  # YYYY.MM.DD
    (re.compile(r"^(\d{4})/(\d{2})/(\d{2})$", re.ASCII), (1, 2, 3)),  # YYYY/MM/DD
    (re.compile(r"^(\d{4})(\d{2})(\d{2})$", re.ASCII), (1, 2, 3)),  # YYYYMMDD
]

WHITESPACE = re.compile(r"\s+")
DIGITS_ONLY = re.compile(r"^\d+$", re.ASCII)
NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$", re.ASCII)
COUNTRY_CODE = re.compile(r"^[A-Z]{2}$")

TRUE_VALUES = frozenset({"1", "true", "tak", "yes", "y", "t"})
FALSE_VALUES = frozenset({"0", "false", "nie", "no", "n", "f"})


def _unchanged(trimmed: str, warning: str) -> TransformResult:
    return TransformResult(value=trimmed, changed=False, warning=warning)


def _result(canonical: str, source: str, warning: Optional[str] = None) -> TransformResult:
    return TransformResult(value=canonical, changed=canonical != source, warning=warning)


def transform_date(raw: str, options: TransformOptions = DEFAULT_OPTIONS) -> TransformResult:
    """
    Transform a date to YYYY-MM-DD.

    The first pattern that matches structurally wins. Only month (1-12) and
    day (1-31) ranges are checked, so "2026-02-31" is accepted as is.
    Dates after today still return the canonical value but carry a warning
    unless ``allow_future_dates`` is set.
    """
    trimmed = raw.strip()
    if not trimmed:
        return TransformResult(value="", changed=False)

    for pattern, (yi, mi, di) in DATE_PATTERNS:
        match = pattern.match(trimmed)
        if not match:
            continue

        y, m, d = match.group(yi), match.group(mi), match.group(di)
        year, month, day = int(y), int(m), int(d)

        if month < 1 or month > 12:
            return _unchanged(trimmed, f"Invalid month: {month}")
        if day < 1 or day > 31:
            return _unchanged(trimmed, f"Invalid day: {day}")

        canonical = f"{y}-{m}-{d}"

        if not options.allow_future_dates:
            today = _today()
            if (year, month, day) > (today.year, today.month, today.day):
                return _result(canonical, trimmed, f"Date in the future: {canonical}")

        return _result(canonical, trimmed)

    return _unchanged(trimmed, f"Unrecognized date format: {trimmed}")


def transform_decimal(raw: str, options: TransformOptions = DEFAULT_OPTIONS) -> TransformResult:
    """
    Transform an amount to a dot-separated decimal with fixed places.

    - Whitespace is removed (space-grouped thousands)
    - With both "," and ".", the rightmost one is the decimal separator
      and the other is dropped as a thousands separator
    - With commas only, the last comma is the decimal separator when only
      digits follow it
    - Rounding is half away from zero
    """
    trimmed = raw.strip()
    if not trimmed:
        return TransformResult(value="", changed=False)

    cleaned = WHITESPACE.sub("", trimmed)
    last_comma = cleaned.rfind(",")
    last_dot = cleaned.rfind(".")

    if last_comma > -1 and last_dot > -1:
        if last_comma > last_dot:
            # 1.234,56
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            # 1,234.56
            cleaned = cleaned.replace(",", "")
    elif last_comma > -1:
        after = cleaned[last_comma + 1:]
        if not DIGITS_ONLY.match(after):
            return _unchanged(trimmed, f"Invalid amount: {trimmed}")
        cleaned = cleaned[:last_comma].replace(",", "") + "." + after

    if not NUMBER.match(cleaned):
        return _unchanged(trimmed, f"Invalid amount: {trimmed}")

    quantum = Decimal(1).scaleb(-options.decimal_places)
    try:
        # Precision must cover every integer digit plus the requested places
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(cleaned) + options.decimal_places + 2)
            number = Decimal(cleaned).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return _unchanged(trimmed, f"Invalid amount: {trimmed}")

    return _result(f"{number:f}", trimmed)


def transform_integer(raw: str, options: TransformOptions = DEFAULT_OPTIONS) -> TransformResult:
    """Transform an integer: strip whitespace, require digits, drop leading zeros."""
    trimmed = raw.strip()
    if not trimmed:
        return TransformResult(value="", changed=False)

    cleaned = WHITESPACE.sub("", trimmed)
    if DIGITS_ONLY.match(cleaned):
        return _result(str(int(cleaned)), trimmed)

    return _unchanged(trimmed, f"Invalid integer: {trimmed}")


def transform_nip(raw: str, options: TransformOptions = DEFAULT_OPTIONS) -> TransformResult:
    """
    Normalize a NIP to 10 digits.

    A value with a bad checksum is still returned cleaned, with a warning,
    so reports can tell "unparseable" apart from "parsed but invalid".
    """
    trimmed = raw.strip()
    if not trimmed:
        return TransformResult(value="", changed=False)

    cleaned = clean_nip(trimmed)
    if not TEN_DIGITS.match(cleaned):
        return _unchanged(trimmed, f"NIP must have 10 digits: {trimmed}")

    if not is_valid_nip(cleaned):
        return _result(cleaned, trimmed, f"Invalid NIP checksum: {cleaned}")

    return _result(cleaned, trimmed)


def transform_boolean(raw: str, options: TransformOptions = DEFAULT_OPTIONS) -> TransformResult:
    """
    Normalize a flag to "true"/"false".

    Empty input stays empty, meaning the element is left out of the
    document, which is not the same as "false".
    """
    trimmed = raw.strip()
    if not trimmed:
        return TransformResult(value="", changed=False)

    lower = trimmed.lower()
    if lower in TRUE_VALUES:
        return _result("true", trimmed)
    if lower in FALSE_VALUES:
        return _result("false", trimmed)

    return _unchanged(trimmed, f"Unrecognized boolean value: {trimmed}")


def transform_country(raw: str, options: TransformOptions = DEFAULT_OPTIONS) -> TransformResult:
    """Normalize a country code: uppercase, exactly two letters."""
    trimmed = raw.strip()
    if not trimmed:
        return TransformResult(value="", changed=False)

    upper = trimmed.upper()
    if COUNTRY_CODE.match(upper):
        return _result(upper, trimmed)

    return _unchanged(trimmed, f"Invalid country code: {trimmed}")


def transform_string(raw: str, options: TransformOptions = DEFAULT_OPTIONS) -> TransformResult:
    """Trim and collapse internal whitespace to single spaces."""
    return _result(WHITESPACE.sub(" ", raw.strip()), raw)


TransformFn = Callable[[str, TransformOptions], TransformResult]

TRANSFORMS: dict[FieldType, TransformFn] = {
    FieldType.DATE: transform_date,
    FieldType.DECIMAL: transform_decimal,
    FieldType.INTEGER: transform_integer,
    FieldType.NIP: transform_nip,
    FieldType.BOOLEAN: transform_boolean,
    FieldType.COUNTRY: transform_country,
    FieldType.STRING: transform_string,
}


def transform_value(
    raw: str,
    field_type: Union[FieldType, str],
    options: TransformOptions = DEFAULT_OPTIONS,
) -> TransformResult:
    """
    Transform a raw cell value according to its field type.

    Unknown type tags fall back to the string transform.
    """
    try:
        key = FieldType(field_type)
    except ValueError:
        key = FieldType.STRING
    return TRANSFORMS[key](raw, options)
