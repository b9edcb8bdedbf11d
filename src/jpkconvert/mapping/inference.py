"""Column type inference from sample values."""

import re
from typing import Optional

from .models import FieldType

MAX_SAMPLES = 10

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
NIP_PATTERN = re.compile(r"^(\d{10}|\d{3}-\d{3}-\d{2}-\d{2})$", re.ASCII)
COUNTRY_PATTERN = re.compile(r"^[A-Z]{2}$")
BOOL_PATTERN = re.compile(r"^(true|false|1|0|tak|nie)$", re.IGNORECASE)
DECIMAL_PATTERN = re.compile(r"^-?\d+[.,]\d+$", re.ASCII)
INTEGER_PATTERN = re.compile(r"^\d+$", re.ASCII)
WHITESPACE = re.compile(r"\s")


def _share(sample: list[str], pattern: re.Pattern, strip_all_space: bool = False) -> float:
    if strip_all_space:
        hits = sum(1 for v in sample if pattern.match(WHITESPACE.sub("", v)))
    else:
        hits = sum(1 for v in sample if pattern.match(v.strip()))
    return hits / len(sample)


def infer_type(values: list[str]) -> Optional[FieldType]:
    """
    Guess a column's field type from its values.

    Only the first ten non-empty values are considered. Types are tested in
    a fixed order and the first satisfied test wins:
    date, NIP, country, boolean (each 80% of samples), decimal (50%),
    integer (80%), then string.

    Returns:
        The inferred FieldType, or None when the column has no non-empty values
    """
    sample = [v for v in values if v.strip()][:MAX_SAMPLES]
    if not sample:
        return None

    if _share(sample, DATE_PATTERN) >= 0.8:
        return FieldType.DATE
    if _share(sample, NIP_PATTERN, strip_all_space=True) >= 0.8:
        return FieldType.NIP
    if _share(sample, COUNTRY_PATTERN) >= 0.8:
        return FieldType.COUNTRY
    if _share(sample, BOOL_PATTERN) >= 0.8:
        return FieldType.BOOLEAN
    if _share(sample, DECIMAL_PATTERN) >= 0.5:
        return FieldType.DECIMAL
    if _share(sample, INTEGER_PATTERN) >= 0.8:
        return FieldType.INTEGER
    return FieldType.STRING
