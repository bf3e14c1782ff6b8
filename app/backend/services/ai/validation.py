"""
Response normalization and validation for classification replies.

Handles:
- Stripping markdown code fences the model wraps around its JSON
- Parsing the cleaned text into a JSON object
- Validating the object against the ClassificationResult schema
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from ...models import ClassificationResult, DocumentType, allowed_document_types
from .exceptions import MalformedResponseError, SchemaValidationError

logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```json|```", re.IGNORECASE)

# Raw replies are truncated to this many characters in logs
LOG_PREVIEW_CHARS = 500


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code fence markers from a model reply.

    Text without fences is returned unchanged. Whitespace left around the
    JSON is tolerated by json.loads.
    """
    return CODE_FENCE_PATTERN.sub("", text)


def parse_response(text: str) -> dict[str, Any]:
    """
    Parse a cleaned reply into a JSON object.

    Raises:
        MalformedResponseError: If the text is not JSON or not an object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse classification response: %s", text[:LOG_PREVIEW_CHARS])
        raise MalformedResponseError(f"Invalid JSON in classification response: {e}") from e

    if not isinstance(data, dict):
        logger.error(
            "Classification response is not a JSON object: %s", text[:LOG_PREVIEW_CHARS]
        )
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(data).__name__}"
        )
    return data


def validate_classification(
    data: dict[str, Any],
    allowed_types: tuple[DocumentType, ...] | None = None,
) -> ClassificationResult:
    """
    Validate parsed reply data against the classification schema.

    Args:
        data: Parsed JSON object from the model.
        allowed_types: Document types this deployment accepts. Defaults to
            the core set without optional categories.

    Returns:
        The validated ClassificationResult.

    Raises:
        SchemaValidationError: If any field has the wrong shape or the
            document type is not accepted.
    """
    if allowed_types is None:
        allowed_types = allowed_document_types()

    try:
        result = ClassificationResult.model_validate(data)
    except ValidationError as e:
        raise SchemaValidationError(f"Classification response failed validation: {e}") from e

    if result.document_type not in allowed_types:
        raise SchemaValidationError(
            f"Document type {result.document_type.value!r} is not enabled"
        )
    return result


def parse_classification(
    raw_text: str,
    allowed_types: tuple[DocumentType, ...] | None = None,
) -> ClassificationResult:
    """Strip fences from, parse, and validate a raw model reply."""
    cleaned = strip_code_fences(raw_text)
    data = parse_response(cleaned)
    try:
        return validate_classification(data, allowed_types)
    except SchemaValidationError as e:
        logger.error(
            "Rejected classification response (%s): %s", e, raw_text[:LOG_PREVIEW_CHARS]
        )
        raise
