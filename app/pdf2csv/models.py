"""
Pydantic models for the PDF-to-CSV conversion pipeline.

Defines the records that flow between pipeline stages and the API
request/response bodies.
"""

from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Pipeline Records
# =============================================================================


class UploadedDocument(BaseModel):
    """
    A single uploaded document as received at the input boundary.

    Attributes:
        content: Raw byte payload.
        media_type: Declared media type of the upload.
        filename: Original filename supplied by the client.
    """

    content: bytes = Field(..., repr=False)
    media_type: str = Field(default="application/pdf")
    filename: str = Field(..., min_length=1)

    @property
    def size(self) -> int:
        return len(self.content)


class InferenceRequest(BaseModel):
    """Bounded text excerpt plus the fixed instruction template."""

    instructions: str = Field(..., description="Fixed instruction template")
    text: str = Field(..., min_length=1, description="Excerpt of the extracted text")
    source_filename: str = Field(default="")
    truncated: bool = Field(default=False)

    @classmethod
    def from_text(
        cls,
        text: str,
        instructions: str,
        max_chars: int,
        source_filename: str = "",
    ) -> "InferenceRequest":
        """
        Build a request, keeping at most ``max_chars`` characters of text.

        Leading whitespace is dropped first so it does not use up the excerpt.
        """
        text = text.lstrip()
        return cls(
            instructions=instructions,
            text=text[:max_chars],
            source_filename=source_filename,
            truncated=len(text) > max_chars,
        )


class InferenceResponse(BaseModel):
    """Raw free-form reply from the inference service."""

    text: str = Field(default="")
    model: str | None = Field(default=None)


class TableMetadata(BaseModel):
    """
    Metadata attached to a structured table.

    Unknown keys returned by the service are kept as extras.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    source: str = Field(default="", description="Description of the source")
    row_count: int = Field(default=0, ge=0, alias="rowCount")

    @field_validator("source", mode="before")
    @classmethod
    def coerce_source(cls, v: Any) -> str:
        """Accept any scalar as the source description."""
        if v is None:
            return ""
        return str(v)


class StructuredTable(BaseModel):
    """
    Tabular payload decoded from the inference reply.

    Headers are unique and in declared order. Rows are lists of cell
    values; their width is normalized later by the table builder.
    """

    headers: list[str] = Field(..., min_length=1)
    rows: list[list[Any]]
    metadata: TableMetadata = Field(default_factory=TableMetadata)

    @field_validator("headers", mode="before")
    @classmethod
    def normalize_headers(cls, v: Any) -> Any:
        """Stringify header names and make duplicates unique."""
        if not isinstance(v, list):
            return v

        headers: list[str] = []
        seen: set[str] = set()
        for index, raw in enumerate(v):
            name = "" if raw is None else str(raw).strip()
            if not name:
                name = f"Column {index + 1}"
            candidate = name
            suffix = 2
            while candidate in seen:
                candidate = f"{name}_{suffix}"
                suffix += 1
            seen.add(candidate)
            headers.append(candidate)
        return headers

    @field_validator("metadata", mode="before")
    @classmethod
    def drop_reported_row_count(cls, v: Any) -> Any:
        """Ignore the row count reported by the service; it is recomputed."""
        if not isinstance(v, dict):
            return {}
        return {k: val for k, val in v.items() if k not in ("rowCount", "row_count")}

    @model_validator(mode="before")
    @classmethod
    def rows_from_objects(cls, data: Any) -> Any:
        """Convert rows given as JSON objects into lists in header order."""
        if not isinstance(data, dict):
            return data
        headers = data.get("headers")
        rows = data.get("rows")
        if not isinstance(headers, list) or not isinstance(rows, list):
            return data
        if not any(isinstance(row, dict) for row in rows):
            return data

        def lookup(row: dict[str, Any], header: Any) -> Any:
            if isinstance(header, str) and header in row:
                return row[header]
            key = "" if header is None else str(header).strip()
            return row.get(key)

        converted = [
            [lookup(row, h) for h in headers] if isinstance(row, dict) else row
            for row in rows
        ]
        return {**data, "rows": converted}

    @model_validator(mode="after")
    def sync_row_count(self) -> "StructuredTable":
        self.metadata.row_count = len(self.rows)
        return self


class TabularArtifact(BaseModel):
    """A CSV file written by the table builder."""

    filename: str
    path: Path
    row_count: int = Field(..., ge=0)
    column_count: int = Field(..., ge=1)
    size_bytes: int = Field(default=0, ge=0)


class ConversionResult(BaseModel):
    """Outcome of a successful pipeline run."""

    artifact: TabularArtifact
    original_filename: str
    rows_extracted: int = Field(..., ge=0)
    columns_extracted: int = Field(..., ge=1)
    source_description: str = Field(default="")
    text_truncated: bool = Field(default=False)


# =============================================================================
# API Models
# =============================================================================


class ConversionMetadata(BaseModel):
    """Summary of a conversion returned to the client."""

    original_file: str
    rows_extracted: int
    columns_extracted: int
    source: str = ""
    text_truncated: bool = False


class ConvertResponse(BaseModel):
    """Response model for the convert endpoint."""

    success: bool = True
    message: str = Field(default="Conversion successful")
    csv_file: str = Field(..., description="Generated artifact identifier")
    download_url: str
    metadata: ConversionMetadata

    @classmethod
    def from_result(cls, result: ConversionResult) -> "ConvertResponse":
        filename = result.artifact.filename
        return cls(
            csv_file=filename,
            download_url=f"/api/download/{filename}",
            metadata=ConversionMetadata(
                original_file=result.original_filename,
                rows_extracted=result.rows_extracted,
                columns_extracted=result.columns_extracted,
                source=result.source_description,
                text_truncated=result.text_truncated,
            ),
        )


class ArtifactInfo(BaseModel):
    """A previously generated artifact."""

    filename: str
    size: int = Field(..., ge=0)
    created: datetime
    download_url: str


class ArtifactListResponse(BaseModel):
    """Response model for the artifact listing endpoint."""

    files: list[ArtifactInfo] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Body returned for any classified conversion failure."""

    error: str = Field(..., description="Stable machine-readable category")
    detail: str = Field(..., description="Human-readable description")
    stage: str | None = Field(default=None, description="Pipeline stage that failed")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    message: str = Field(default="")
    inference_configured: bool = Field(default=False)
    version: str = Field(default="1.0.0")
    timestamp: datetime = Field(default_factory=datetime.now)
