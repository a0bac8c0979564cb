"""
PDF text extraction using pypdf.

Converts an uploaded PDF payload into plain text for inference.
"""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..exceptions import EmptyContent, UnreadableDocument
from ..models import UploadedDocument

logger = logging.getLogger(__name__)


class TextExtractor:
    """
    Service for extracting text from PDF documents.

    Uses pypdf, so no external binaries are required.
    """

    def __init__(self, page_separator: str = "\n"):
        """
        Initialize the text extractor.

        Args:
            page_separator: String inserted between the text of consecutive pages.
        """
        self.page_separator = page_separator

    def extract(self, document: UploadedDocument) -> str:
        """
        Extract the text of every page of a PDF.

        Args:
            document: The uploaded PDF.

        Returns:
            The concatenated page text.

        Raises:
            UnreadableDocument: If the payload is not a parseable PDF.
            EmptyContent: If the document contains no extractable text.
        """
        pdf_bytes = document.content

        # Validate PDF magic bytes
        if not pdf_bytes[:4] == b"%PDF":
            raise UnreadableDocument(
                f"Invalid PDF file '{document.filename}': does not start with PDF header"
            )

        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            if reader.is_encrypted and not reader.decrypt(""):
                raise UnreadableDocument(
                    f"PDF '{document.filename}' is encrypted and cannot be read"
                )
            page_texts = [page.extract_text() or "" for page in reader.pages]

        except UnreadableDocument:
            raise

        except PyPdfError as e:
            logger.error("PDF parse error for %s: %s", document.filename, e)
            raise UnreadableDocument(f"Invalid or corrupted PDF file: {e}") from e

        except Exception as e:
            logger.exception("Unexpected error during text extraction")
            raise UnreadableDocument(f"PDF text extraction failed: {e}") from e

        text = self.page_separator.join(page_texts)
        logger.info(
            "Extracted %d characters from %d page(s) of %s",
            len(text),
            len(page_texts),
            document.filename,
        )

        if not text.strip():
            raise EmptyContent(
                f"PDF '{document.filename}' is empty or contains no extractable text"
            )
        return text
