"""Header and synonym normalization for fuzzy comparison."""

import re
import unicodedata

SEPARATOR_RUN = re.compile(r"[\s\-./]+")
DISALLOWED = re.compile(r"[^a-z0-9_]")
UNDERSCORE_RUN = re.compile(r"_+")


def normalize(text: str) -> str:
    """
    Normalize a header or synonym for matching.

    This handles common variations like:
    - Case differences (Data Wystawienia vs data_wystawienia)
    - Polish diacritics (sprzedaży vs sprzedazy, ł vs l)
    - Separators (spaces, dashes, dots, slashes all become one underscore)

    Args:
        text: The string to normalize

    Returns:
        Normalized string containing only [a-z0-9_], without leading or
        trailing underscores
    """
    result = unicodedata.normalize("NFD", text.lower())
    result = "".join(ch for ch in result if not unicodedata.combining(ch))
    # "ł" has no decomposition in NFD
    result = result.replace("ł", "l")
    result = SEPARATOR_RUN.sub("_", result)
    result = DISALLOWED.sub("", result)
    result = UNDERSCORE_RUN.sub("_", result)
    return result.strip("_")
