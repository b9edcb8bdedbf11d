"""Polish tax identification number (NIP) checksum."""

import re
from typing import Optional

NIP_WEIGHTS = (6, 5, 7, 2, 3, 4, 5, 6, 7)

COUNTRY_PREFIX = re.compile(r"^PL", re.IGNORECASE)
SEPARATORS = re.compile(r"[\s\-]")
TEN_DIGITS = re.compile(r"^\d{10}$", re.ASCII)


def clean_nip(raw: str) -> str:
    """Strip a leading PL prefix, spaces and dashes."""
    return SEPARATORS.sub("", COUNTRY_PREFIX.sub("", raw.strip()))


def nip_checksum(digits: str) -> int:
    """Weighted sum of the first nine digits, modulo 11."""
    return sum(int(d) * w for d, w in zip(digits[:9], NIP_WEIGHTS)) % 11


def is_valid_nip(value: str) -> bool:
    """
    Check a NIP.

    Valid when the cleaned value has exactly 10 digits and the mod-11
    checksum equals the last digit. A checksum of 10 is never valid.
    """
    cleaned = clean_nip(value)
    if not TEN_DIGITS.match(cleaned):
        return False
    check = nip_checksum(cleaned)
    return check != 10 and check == int(cleaned[9])


def format_nip(value: str) -> Optional[str]:
    """Format a NIP as ddd-ddd-dd-dd, or None when it is not 10 digits."""
    cleaned = clean_nip(value)
    if not TEN_DIGITS.match(cleaned):
        return None
    return f"{cleaned[:3]}-{cleaned[3:6]}-{cleaned[6:8]}-{cleaned[8:]}"
