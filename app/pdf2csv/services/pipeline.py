"""
PDF-to-CSV conversion pipeline.

Runs extract -> infer -> parse -> build once per uploaded document. The
upload is spooled to the upload directory for the duration of the run and
removed on every exit path.
"""

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from ..config import Settings
from ..exceptions import (
    ConversionError,
    MalformedResponse,
    ServiceError,
    ServiceUnavailable,
    UnreadableDocument,
    WriteFailure,
)
from ..models import ConversionResult, InferenceRequest, UploadedDocument
from .ai.inference import OpenAIInferenceClient, StructureInferenceClient
from .ai.parsing import ResponseParser
from .ai.prompts import TABLE_SYSTEM_PROMPT
from .table_builder import TableBuilder
from .text_extractor import TextExtractor

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """States of a single conversion run."""

    IDLE = "idle"
    EXTRACTING = "extracting"
    INFERRING = "inferring"
    PARSING = "parsing"
    BUILDING = "building"
    DONE = "done"
    FAILED = "failed"


# Category used when a stage fails with an unclassified exception
_STAGE_FAILURES: dict[PipelineState, type[ConversionError]] = {
    PipelineState.IDLE: WriteFailure,
    PipelineState.EXTRACTING: UnreadableDocument,
    PipelineState.INFERRING: ServiceError,
    PipelineState.PARSING: MalformedResponse,
    PipelineState.BUILDING: WriteFailure,
}


class ConversionPipeline:
    """
    Orchestrates one document conversion.

    The pipeline holds only its collaborators and configuration; every call
    to ``convert`` is independent, so concurrent conversions need no locking.
    """

    def __init__(
        self,
        settings: Settings,
        inference_client: StructureInferenceClient,
        extractor: TextExtractor | None = None,
        parser: ResponseParser | None = None,
        builder: TableBuilder | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Immutable application settings.
            inference_client: Client for the external inference service.
            extractor: Text extractor (default: pypdf-based).
            parser: Reply parser.
            builder: CSV writer (default: writes to ``settings.output_dir``).
        """
        self.settings = settings
        self.inference_client = inference_client
        self.extractor = extractor or TextExtractor()
        self.parser = parser or ResponseParser()
        self.builder = builder or TableBuilder(settings.output_dir)

    @contextmanager
    def _spooled_upload(self, document: UploadedDocument) -> Iterator[Path]:
        """
        Write the upload to the upload directory; always delete it afterwards.

        The spool file only marks the upload as held by this run. Extraction
        reads the in-memory payload, so the file is never read back.
        """
        upload_dir = self.settings.upload_dir
        upload_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(document.filename).suffix or ".pdf"
        fd, name = tempfile.mkstemp(prefix="pdfFile-", suffix=suffix, dir=upload_dir)
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(document.content)
            yield path
        finally:
            path.unlink(missing_ok=True)
            logger.debug("Removed spooled upload %s", path)

    async def convert(self, document: UploadedDocument) -> ConversionResult:
        """
        Convert a PDF into a CSV artifact.

        Args:
            document: The uploaded PDF.

        Returns:
            ConversionResult with the artifact and row/column counts.

        Raises:
            ConversionError: A classified failure, with ``stage`` set to the
                state the pipeline was in when it failed.
        """
        state = PipelineState.IDLE
        logger.info("Processing: %s (%d bytes)", document.filename, document.size)

        try:
            if not self.inference_client.is_configured:
                raise ServiceUnavailable("Inference API key is not configured")

            with self._spooled_upload(document):
                state = PipelineState.EXTRACTING
                text = self.extractor.extract(document)

                state = PipelineState.INFERRING
                request = InferenceRequest.from_text(
                    text,
                    instructions=TABLE_SYSTEM_PROMPT,
                    max_chars=self.settings.max_text_chars,
                    source_filename=document.filename,
                )
                response = await self.inference_client.infer(request)

                state = PipelineState.PARSING
                table = self.parser.parse(response)

                state = PipelineState.BUILDING
                artifact = self.builder.build(table)

        except ConversionError as e:
            e.stage = state.value
            logger.error(
                "Conversion of %s %s -> %s: [%s] %s",
                document.filename,
                state.value,
                PipelineState.FAILED.value,
                e.category,
                e.detail,
            )
            raise

        except Exception as e:
            logger.exception(
                "Unexpected failure converting %s while %s", document.filename, state.value
            )
            error_class = _STAGE_FAILURES.get(state, ServiceError)
            raise error_class(f"Conversion failed: {e}", stage=state.value) from e

        state = PipelineState.DONE
        logger.info(
            "Converted %s -> %s (%d rows, %d columns)",
            document.filename,
            artifact.filename,
            artifact.row_count,
            artifact.column_count,
        )
        return ConversionResult(
            artifact=artifact,
            original_filename=document.filename,
            rows_extracted=artifact.row_count,
            columns_extracted=artifact.column_count,
            source_description=table.metadata.source,
            text_truncated=request.truncated,
        )


def create_pipeline(settings: Settings) -> ConversionPipeline:
    """Build a pipeline backed by the OpenAI inference client."""
    client = OpenAIInferenceClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout=settings.inference_timeout,
        max_tokens=settings.max_output_tokens,
    )
    return ConversionPipeline(settings, client)
