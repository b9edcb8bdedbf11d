"""Staged conversion pipeline with accumulated diagnostics."""

from .models import (
    IssueSeverity,
    PipelineStage,
    MappingSource,
    PipelineIssue,
    PipelineConfig,
    PipelineResult,
)
from .validator import RowValidator
from .pipeline import ConversionPipeline

__all__ = [
    "IssueSeverity",
    "PipelineStage",
    "MappingSource",
    "PipelineIssue",
    "PipelineConfig",
    "PipelineResult",
    "RowValidator",
    "ConversionPipeline",
]
