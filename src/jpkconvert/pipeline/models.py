"""Data models for conversion pipeline runs."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from ..mapping.models import MappingResult
from ..sheets.models import RawSheet, SheetReadResult
from ..transform.models import TransformedRow, TransformOptions


class IssueSeverity(str, Enum):
    """Severity of a pipeline issue."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class PipelineStage(str, Enum):
    """Stage that raised an issue."""

    PARSE = "parse"
    MAP = "map"
    TRANSFORM = "transform"
    VALIDATE = "validate"


class MappingSource(str, Enum):
    """Where the mapping used for a run came from."""

    CUSTOM = "custom"
    PROFILE = "profile"
    AUTO = "auto"


class PipelineIssue(BaseModel):
    """A single problem or note recorded during a run."""

    severity: IssueSeverity
    stage: PipelineStage
    message: str
    row: Optional[int] = None  # 0-based row index
    field: Optional[str] = None


class PipelineConfig(BaseModel):
    """Configuration for one pipeline run."""

    document_type: str
    subtype: str
    transform_options: TransformOptions = Field(default_factory=TransformOptions)
    skip_validation: bool = False
    custom_mapping: Optional[MappingResult] = None


class PipelineResult(BaseModel):
    """Everything a run produced; always returned, never raised."""

    transformed_rows: list[TransformedRow] = Field(default_factory=list)
    issues: list[PipelineIssue] = Field(default_factory=list)
    mapping: Optional[MappingResult] = None
    mapping_source: Optional[MappingSource] = None
    sheet: Optional[RawSheet] = None
    read_result: Optional[SheetReadResult] = None

    @property
    def errors(self) -> list[PipelineIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> list[PipelineIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(i.severity == IssueSeverity.ERROR for i in self.issues)

    def issues_for_row(self, row: int) -> list[PipelineIssue]:
        """Return issues tied to one row."""
        return [i for i in self.issues if i.row == row]
