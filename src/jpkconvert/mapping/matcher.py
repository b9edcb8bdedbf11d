"""Scoring of source headers against field definitions."""

from .models import FieldDefinition, HeaderMatch, MappingMethod
from .normalize import normalize

# Scores at or below this are not viable mapping candidates
VIABLE_THRESHOLD = 0.5

NAME_SCORE = 1.0
LABEL_SCORE = 0.95
SYNONYM_SCORE = 0.9
PARTIAL_NAME_SCORE = 0.7
PARTIAL_SYNONYM_SCORE = 0.6

# Both sides of a containment match must be longer than this
MIN_PARTIAL_LENGTH = 2

NO_MATCH = HeaderMatch(confidence=0.0, method=MappingMethod.PATTERN)


def _contains_either_way(a: str, b: str) -> bool:
    if len(a) <= MIN_PARTIAL_LENGTH or len(b) <= MIN_PARTIAL_LENGTH:
        return False
    return a in b or b in a


def match_header(header: str, field: FieldDefinition) -> HeaderMatch:
    """
    Score a header against a field definition.

    The cascade stops at the first hit:
    1. Header equals the field name (1.0, exact)
    2. Header equals the field label (0.95, exact)
    3. Header equals a synonym (0.9, synonym)
    4. Header and field name contain one another (0.7, pattern)
    5. Header and a synonym contain one another (0.6, pattern)

    All comparisons run on normalized text.

    Returns:
        HeaderMatch with confidence 0.0 when nothing matched
    """
    norm_header = normalize(header)
    if not norm_header:
        return NO_MATCH

    norm_name = normalize(field.name)

    if norm_header == norm_name:
        return HeaderMatch(confidence=NAME_SCORE, method=MappingMethod.EXACT)

    if norm_header == normalize(field.label):
        return HeaderMatch(confidence=LABEL_SCORE, method=MappingMethod.EXACT)

    norm_synonyms = [normalize(syn) for syn in field.synonyms]

    if norm_header in norm_synonyms:
        return HeaderMatch(confidence=SYNONYM_SCORE, method=MappingMethod.SYNONYM)

    if _contains_either_way(norm_header, norm_name):
        return HeaderMatch(confidence=PARTIAL_NAME_SCORE, method=MappingMethod.PATTERN)

    for norm_syn in norm_synonyms:
        if _contains_either_way(norm_header, norm_syn):
            return HeaderMatch(confidence=PARTIAL_SYNONYM_SCORE, method=MappingMethod.PATTERN)

    return NO_MATCH


def is_viable(match: HeaderMatch) -> bool:
    """Whether a header match is strong enough to become a candidate."""
    return match.confidence > VIABLE_THRESHOLD
