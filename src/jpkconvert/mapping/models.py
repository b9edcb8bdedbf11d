"""Data models for column-to-field mapping."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    """Semantic type of a target field; drives transform and validation."""

    STRING = "string"
    DATE = "date"
    DECIMAL = "decimal"
    INTEGER = "integer"
    NIP = "nip"
    BOOLEAN = "boolean"
    COUNTRY = "country"


class MappingMethod(str, Enum):
    """How a column mapping was determined."""

    EXACT = "exact"
    SYNONYM = "synonym"
    PATTERN = "pattern"
    POSITION = "position"
    MANUAL = "manual"


class FieldDefinition(BaseModel):
    """A single target field in a document catalog."""

    model_config = ConfigDict(frozen=True)

    name: str  # XML element name, e.g. "K_10", "P_2"
    label: str  # Human-readable label
    type: FieldType = FieldType.STRING
    required: bool = False
    synonyms: tuple[str, ...] = ()  # Aliases seen in source exports
    pattern: Optional[str] = None  # Regex the value must match
    description: Optional[str] = None


class ColumnMapping(BaseModel):
    """Mapping of one source column to one target field."""

    source_column: int = Field(ge=0)
    source_header: Optional[str] = None
    target_field: str
    confidence: float = Field(ge=0.0, le=1.0)
    method: MappingMethod


class MappingResult(BaseModel):
    """
    Result of mapping a sheet onto a field catalog.

    Each source column and each target field appears in at most one entry of
    ``mappings``; the unmapped lists hold the complements.
    """

    mappings: list[ColumnMapping] = Field(default_factory=list)
    unmapped_fields: list[str] = Field(default_factory=list)
    unmapped_columns: list[int] = Field(default_factory=list)

    @property
    def mapped_columns(self) -> list[int]:
        return [m.source_column for m in self.mappings]

    @property
    def mapped_fields(self) -> list[str]:
        return [m.target_field for m in self.mappings]

    def for_field(self, field_name: str) -> Optional[ColumnMapping]:
        """Return the mapping targeting a field, if any."""
        for mapping in self.mappings:
            if mapping.target_field == field_name:
                return mapping
        return None

    def for_column(self, column: int) -> Optional[ColumnMapping]:
        """Return the mapping reading from a column, if any."""
        for mapping in self.mappings:
            if mapping.source_column == column:
                return mapping
        return None


class HeaderMatch(BaseModel):
    """Score of a single header against a single field."""

    confidence: float
    method: MappingMethod


class CatalogNotFoundError(Exception):
    """Exception raised when no field catalog exists for a document subtype."""

    pass


class ProfileRegistrationError(Exception):
    """Exception raised when a profile cannot be registered."""

    pass
