"""
Conversion error taxonomy.

Every pipeline stage raises one of these. Each class carries a stable
machine-readable ``category`` and the HTTP status it maps to.
"""

from fastapi import status


class ConversionError(Exception):
    """Base class for all conversion failures."""

    category = "conversion_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, stage: str | None = None):
        super().__init__(detail)
        self.detail = detail
        self.stage = stage


class UnreadableDocument(ConversionError):
    """Raised when the payload cannot be parsed as a PDF."""

    category = "unreadable_document"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class EmptyContent(ConversionError):
    """Raised when the document yields no text."""

    category = "empty_content"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ServiceUnavailable(ConversionError):
    """Raised when the inference service is not configured."""

    category = "service_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ServiceError(ConversionError):
    """Raised when the call to the inference service fails or times out."""

    category = "service_error"
    status_code = status.HTTP_502_BAD_GATEWAY


class MalformedResponse(ConversionError):
    """Raised when no decodable JSON object is found in the reply."""

    category = "malformed_response"
    status_code = status.HTTP_502_BAD_GATEWAY


class InvalidSchema(ConversionError):
    """Raised when the decoded object is not a usable table."""

    category = "invalid_schema"
    status_code = status.HTTP_502_BAD_GATEWAY


class WriteFailure(ConversionError):
    """Raised when the CSV artifact cannot be written."""

    category = "write_failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ArtifactNotFound(ConversionError):
    """Raised when a requested artifact does not exist."""

    category = "artifact_not_found"
    status_code = status.HTTP_404_NOT_FOUND
