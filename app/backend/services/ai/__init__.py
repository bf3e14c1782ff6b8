"""
AI service package for insurance document classification.

This package provides modular AI functionality split into:
- prompt: Canonical classification instructions and message content
- client: The injectable classifier client and its OpenAI implementation
- validation: Fence stripping, parsing, and schema validation of replies

The ClassificationService class ties these together for one request.
"""

import logging
from functools import lru_cache

from ...config import Settings, get_settings
from ...models import ClassificationResult, DocumentType, allowed_document_types
from ..pdf_service import EmptyDocumentError, PageImage
from .client import ClassifierClient, OpenAIClassifierClient
from .exceptions import (
    AIServiceError,
    ClassificationServiceFailure,
    MalformedResponseError,
    SchemaValidationError,
)
from .prompt import build_instructions, build_message_content
from .validation import (
    parse_classification,
    parse_response,
    strip_code_fences,
    validate_classification,
)

logger = logging.getLogger(__name__)

__all__ = [
    "AIServiceError",
    "ClassificationService",
    "ClassificationServiceFailure",
    "ClassifierClient",
    "MalformedResponseError",
    "OpenAIClassifierClient",
    "SchemaValidationError",
    "build_instructions",
    "build_message_content",
    "get_classification_service",
    "parse_classification",
    "parse_response",
    "strip_code_fences",
    "validate_classification",
]


class ClassificationService:
    """
    Classifies a rendered document with one call to the classifier client.

    The instruction text is built once per service; only the page images
    change between requests.
    """

    def __init__(
        self,
        client: ClassifierClient,
        estimate_author: str = "AdjustPro Solutions LLC",
        include_letter_of_representation: bool = False,
    ):
        """
        Initialize the classification service.

        Args:
            client: Performs the actual classification call.
            estimate_author: Company whose estimates classify as Estimate.
            include_letter_of_representation: Accept the optional
                "Letter Of Representation" category.
        """
        self.client = client
        self.allowed_types: tuple[DocumentType, ...] = allowed_document_types(
            include_letter_of_representation
        )
        self.instructions = build_instructions(
            estimate_author=estimate_author,
            include_letter_of_representation=include_letter_of_representation,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClassificationService":
        return cls(
            client=OpenAIClassifierClient.from_settings(settings),
            estimate_author=settings.estimate_author,
            include_letter_of_representation=settings.include_letter_of_representation,
        )

    def classify(self, pages: list[PageImage]) -> ClassificationResult:
        """
        Classify a document from its ordered page images.

        Args:
            pages: Rendered pages in page order.

        Returns:
            The validated ClassificationResult.

        Raises:
            EmptyDocumentError: If there are no pages.
            ClassificationServiceFailure: If the client call fails.
            MalformedResponseError: If the reply is not a JSON object.
            SchemaValidationError: If the reply does not match the schema.
        """
        if not pages:
            raise EmptyDocumentError("No page images to classify")

        images = [page.base64 for page in pages]
        raw_text = self.client.classify(images, self.instructions)

        result = parse_classification(raw_text, self.allowed_types)
        logger.info(
            "Classified %d page(s) as %s", len(images), result.document_type.value
        )
        return result


@lru_cache
def get_classification_service() -> ClassificationService:
    """FastAPI dependency building the classification service from settings."""
    return ClassificationService.from_settings(get_settings())
