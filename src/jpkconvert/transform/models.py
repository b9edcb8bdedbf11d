"""Data models for value transforms."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class TransformOptions(BaseModel):
    """Options shared by all value transforms."""

    model_config = ConfigDict(frozen=True)

    decimal_places: int = Field(default=2, ge=0)
    allow_future_dates: bool = False


class TransformResult(BaseModel):
    """Result of transforming a single raw value."""

    value: str  # Canonical value, or the trimmed input when it could not be parsed
    changed: bool = False
    warning: Optional[str] = None


class TransformedRow(BaseModel):
    """
    One row after transformation.

    A field missing from ``values`` was not mapped at all; an empty string
    means the field was mapped but the cell was empty.
    """

    index: int
    values: dict[str, str] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)

    def get(self, field_name: str) -> Optional[str]:
        """Return a field's value, or None when the field is absent."""
        return self.values.get(field_name)

    def has(self, field_name: str) -> bool:
        return field_name in self.values
