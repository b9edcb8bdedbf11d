"""Canonicalization of raw cell values."""

from .models import TransformOptions, TransformResult, TransformedRow
from .nip import NIP_WEIGHTS, clean_nip, nip_checksum, is_valid_nip, format_nip
from .values import (
    transform_date,
    transform_decimal,
    transform_integer,
    transform_nip,
    transform_boolean,
    transform_country,
    transform_string,
    transform_value,
)
from .rows import transform_row, transform_rows

__all__ = [
    "TransformOptions",
    "TransformResult",
    "TransformedRow",
    "NIP_WEIGHTS",
    "clean_nip",
    "nip_checksum",
    "is_valid_nip",
    "format_nip",
    "transform_date",
    "transform_decimal",
    "transform_integer",
    "transform_nip",
    "transform_boolean",
    "transform_country",
    "transform_string",
    "transform_value",
    "transform_row",
    "transform_rows",
]
