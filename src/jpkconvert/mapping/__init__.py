"""Column-to-field mapping: normalization, scoring, inference and assignment."""

from .models import (
    FieldType,
    FieldDefinition,
    MappingMethod,
    ColumnMapping,
    MappingResult,
    HeaderMatch,
    CatalogNotFoundError,
    ProfileRegistrationError,
)
from .normalize import normalize
from .matcher import match_header, is_viable, VIABLE_THRESHOLD
from .inference import infer_type
from .auto_mapper import (
    auto_map,
    apply_positional_mapping,
    set_manual_mapping,
    remove_mapping,
    TYPE_MATCH_CONFIDENCE,
)
from .catalogs import CatalogRegistry, default_catalogs, field_types
from .profiles import SystemProfile, ProfileRegistry, default_profiles

__all__ = [
    "FieldType",
    "FieldDefinition",
    "MappingMethod",
    "ColumnMapping",
    "MappingResult",
    "HeaderMatch",
    "CatalogNotFoundError",
    "ProfileRegistrationError",
    "normalize",
    "match_header",
    "is_viable",
    "VIABLE_THRESHOLD",
    "infer_type",
    "auto_map",
    "apply_positional_mapping",
    "set_manual_mapping",
    "remove_mapping",
    "TYPE_MATCH_CONFIDENCE",
    "CatalogRegistry",
    "default_catalogs",
    "field_types",
    "SystemProfile",
    "ProfileRegistry",
    "default_profiles",
]
