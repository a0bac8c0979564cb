"""
Router for conversion and artifact endpoints.

Handles:
- PDF upload and conversion to CSV
- CSV artifact download
- Artifact listing
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse

from ..config import Settings, get_settings
from ..models import ArtifactListResponse, ConvertResponse, UploadedDocument
from ..services.artifacts import ArtifactStore
from ..services.pipeline import ConversionPipeline, create_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["conversion"])

PDF_MEDIA_TYPE = "application/pdf"


def get_pipeline(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ConversionPipeline:
    """Build a conversion pipeline from the application settings."""
    return create_pipeline(settings)


def get_artifact_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ArtifactStore:
    return ArtifactStore(settings.output_dir)


@router.post("/convert", response_model=ConvertResponse)
async def convert_pdf(
    pdf_file: Annotated[UploadFile, File(alias="pdfFile", description="PDF file to convert")],
    settings: Annotated[Settings, Depends(get_settings)],
    pipeline: Annotated[ConversionPipeline, Depends(get_pipeline)],
) -> ConvertResponse:
    """
    Convert an uploaded PDF into a CSV file.

    The upload is validated (filename, media type, size) before it enters the
    pipeline. Pipeline failures are rendered by the ConversionError handler.
    """
    try:
        if not pdf_file.filename:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No filename provided",
            )

        if pdf_file.content_type != PDF_MEDIA_TYPE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only PDF files are accepted",
            )

        # Read one byte past the limit to detect oversized uploads
        file_bytes = await pdf_file.read(settings.max_file_size + 1)

        if not file_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Empty file provided",
            )

        if len(file_bytes) > settings.max_file_size:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File exceeds the maximum size of {settings.max_file_size} bytes",
            )

        document = UploadedDocument(
            content=file_bytes,
            media_type=pdf_file.content_type,
            filename=pdf_file.filename,
        )
    finally:
        await pdf_file.close()

    result = await pipeline.convert(document)
    return ConvertResponse.from_result(result)


@router.get("/download/{filename}")
async def download_artifact(
    filename: str,
    store: Annotated[ArtifactStore, Depends(get_artifact_store)],
) -> FileResponse:
    """Download a generated CSV file."""
    path = store.resolve(filename)
    return FileResponse(path, media_type="text/csv", filename=filename)


@router.get("/files", response_model=ArtifactListResponse)
async def list_artifacts(
    store: Annotated[ArtifactStore, Depends(get_artifact_store)],
) -> ArtifactListResponse:
    """List generated CSV files, newest first."""
    return ArtifactListResponse(files=store.list_artifacts())
