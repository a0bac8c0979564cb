"""
Locate and validate the JSON table embedded in an inference reply.

The reply is untrusted text: the model may wrap the object in prose or
return something that is not a table at all.
"""

import json
import logging

from pydantic import ValidationError

from ...exceptions import InvalidSchema, MalformedResponse
from ...models import InferenceResponse, StructuredTable

logger = logging.getLogger(__name__)


def find_json_object(text: str) -> str | None:
    """
    Return the first balanced ``{...}`` span in ``text``.

    Braces inside JSON string literals (including escaped quotes) do not
    affect nesting.

    Args:
        text: Free-form text that may embed a JSON object.

    Returns:
        The span, or None if there is no opening brace or it is never closed.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


class ResponseParser:
    """Turns an inference reply into a validated ``StructuredTable``."""

    def parse(self, response: InferenceResponse) -> StructuredTable:
        """
        Parse and validate the structured payload of a reply.

        Raises:
            MalformedResponse: If no JSON object can be found or decoded.
            InvalidSchema: If the object lacks usable ``headers``/``rows``.
        """
        span = find_json_object(response.text)
        if span is None:
            logger.error("No JSON object in reply: %s", response.text[:500])
            raise MalformedResponse("No JSON object found in the inference response")

        try:
            payload = json.loads(span)
        except json.JSONDecodeError as e:
            logger.error("Failed to decode reply JSON: %s", span[:500])
            raise MalformedResponse(f"Invalid JSON in inference response: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedResponse("Inference response JSON is not an object")

        missing = [key for key in ("headers", "rows") if not isinstance(payload.get(key), list)]
        if missing:
            raise InvalidSchema(
                f"Inference response is missing list field(s): {', '.join(missing)}"
            )

        try:
            table = StructuredTable.model_validate(payload)
        except ValidationError as e:
            logger.error("Inference response failed validation: %s", e)
            raise InvalidSchema(f"Invalid table structure: {e.error_count()} error(s)") from e

        logger.info(
            "Parsed table with %d column(s) and %d row(s)",
            len(table.headers),
            len(table.rows),
        )
        return table
