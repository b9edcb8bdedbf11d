"""API routes for jpk-convert."""

from typing import Optional
from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends, HTTPException, Request

from ..config import settings
from ..mapping import (
    FieldDefinition,
    FieldType,
    MappingResult,
    SystemProfile,
    auto_map,
)
from ..pipeline import ConversionPipeline, PipelineConfig, PipelineResult
from ..sheets import RawSheet
from ..transform import TransformOptions, TransformResult, format_nip, is_valid_nip, transform_value

router = APIRouter()


def get_pipeline(request: Request) -> ConversionPipeline:
    """Get the pipeline built for this application."""
    return request.app.state.pipeline


class CatalogSummary(BaseModel):
    """A registered field catalog."""

    document_type: str
    subtype: str
    label: Optional[str] = None
    field_count: int
    required_fields: list[str]


class CatalogDetail(BaseModel):
    """Fields of one catalog."""

    document_type: str
    subtype: str
    fields: list[FieldDefinition]


class AutoMapRequest(BaseModel):
    """Request to auto-map a sheet."""

    document_type: str
    subtype: str
    sheet: RawSheet


class ConvertRequest(BaseModel):
    """Request to convert a pre-parsed sheet."""

    document_type: str
    subtype: str
    sheet: RawSheet
    transform_options: Optional[TransformOptions] = None
    skip_validation: Optional[bool] = None
    custom_mapping: Optional[MappingResult] = None


class TransformRequest(BaseModel):
    """Request to transform a single value."""

    value: str
    type: str = FieldType.STRING.value
    options: TransformOptions = Field(default_factory=TransformOptions)


class NipRequest(BaseModel):
    """Request to validate a NIP."""

    nip: str


class NipResponse(BaseModel):
    """NIP validation result."""

    nip: str
    valid: bool
    formatted: Optional[str] = None


def _require_catalog(
    pipeline: ConversionPipeline, document_type: str, subtype: str
) -> list[FieldDefinition]:
    fields = pipeline.catalogs.get(document_type, subtype)
    if fields is None:
        raise HTTPException(
            status_code=404, detail=f"No field catalog for {document_type}.{subtype}"
        )
    return fields


@router.get("/health")
async def health_check(pipeline: ConversionPipeline = Depends(get_pipeline)):
    """Health check endpoint with diagnostics."""
    return {
        "status": "ok",
        "service": "jpk-convert",
        "config": {
            "catalogs": len(pipeline.catalogs.keys()),
            "profiles": len(pipeline.profiles.list_profiles()),
            "decimal_places": settings.decimal_places,
            "allow_future_dates": settings.allow_future_dates,
        },
    }


# Catalog and profile endpoints


@router.get("/catalogs", response_model=list[CatalogSummary])
async def list_catalogs(pipeline: ConversionPipeline = Depends(get_pipeline)):
    """List registered field catalogs."""
    summaries = []
    for document_type, subtype in pipeline.catalogs.keys():
        fields = pipeline.catalogs.require(document_type, subtype)
        summaries.append(
            CatalogSummary(
                document_type=document_type,
                subtype=subtype,
                label=pipeline.catalogs.label(document_type, subtype),
                field_count=len(fields),
                required_fields=[f.name for f in fields if f.required],
            )
        )
    return summaries


@router.get("/catalogs/{document_type}/{subtype}", response_model=CatalogDetail)
async def get_catalog(
    document_type: str, subtype: str, pipeline: ConversionPipeline = Depends(get_pipeline)
):
    """Get the fields of one catalog."""
    fields = _require_catalog(pipeline, document_type, subtype)
    return CatalogDetail(document_type=document_type, subtype=subtype, fields=fields)


@router.get("/profiles", response_model=list[SystemProfile])
async def list_profiles(pipeline: ConversionPipeline = Depends(get_pipeline)):
    """List registered system profiles."""
    return pipeline.profiles.list_profiles()


# Mapping and conversion endpoints


@router.post("/automap", response_model=MappingResult)
async def automap(request: AutoMapRequest, pipeline: ConversionPipeline = Depends(get_pipeline)):
    """Propose a column mapping for a sheet."""
    fields = _require_catalog(pipeline, request.document_type, request.subtype)
    return auto_map(request.sheet, fields, sample_rows=pipeline.sample_rows)


@router.post("/convert", response_model=PipelineResult)
async def convert(request: ConvertRequest, pipeline: ConversionPipeline = Depends(get_pipeline)):
    """Run the conversion pipeline on a pre-parsed sheet."""
    config = PipelineConfig(
        document_type=request.document_type,
        subtype=request.subtype,
        transform_options=request.transform_options or settings.transform_options(),
        skip_validation=(
            settings.skip_validation if request.skip_validation is None else request.skip_validation
        ),
        custom_mapping=request.custom_mapping,
    )
    return pipeline.run_on_sheet(request.sheet, config)


@router.post("/convert/file", response_model=PipelineResult)
async def convert_file(
    request: Request,
    filename: str,
    document_type: str,
    subtype: str,
    system: Optional[str] = None,
    pipeline: ConversionPipeline = Depends(get_pipeline),
):
    """Run the full pipeline on a raw file sent as the request body."""
    body = await request.body()
    if len(body) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File too large")

    metadata = {"document_type": document_type, "subtype": subtype}
    if system or settings.default_system:
        metadata["system"] = system or settings.default_system

    config = PipelineConfig(
        document_type=document_type,
        subtype=subtype,
        transform_options=settings.transform_options(),
        skip_validation=settings.skip_validation,
    )
    return pipeline.run(body, filename, config, metadata=metadata)


@router.post("/transform", response_model=TransformResult)
async def transform(request: TransformRequest):
    """Transform a single value."""
    return transform_value(request.value, request.type, request.options)


@router.post("/nip/validate", response_model=NipResponse)
async def validate_nip(request: NipRequest):
    """Validate a NIP checksum."""
    valid = is_valid_nip(request.nip)
    return NipResponse(
        nip=request.nip,
        valid=valid,
        formatted=format_nip(request.nip) if valid else None,
    )
