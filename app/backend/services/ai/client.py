"""
Clients for the external classification service.

The classification stage depends only on the ClassifierClient protocol, so
tests can substitute a fake that returns canned replies.
"""

import logging
from typing import Protocol

from ...config import Settings
from .exceptions import ClassificationServiceFailure
from .prompt import build_message_content

logger = logging.getLogger(__name__)


class ClassifierClient(Protocol):
    """Anything that turns page images plus instructions into reply text."""

    def classify(self, images: list[str], instructions: str) -> str:
        ...


class OpenAIClassifierClient:
    """
    ClassifierClient backed by OpenAI chat completions with vision.

    Sends one user message holding the instructions followed by every page
    image, with a low temperature to keep the output deterministic.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.1,
        image_detail: str = "high",
        base_url: str | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.image_detail = image_detail
        self.base_url = base_url
        self._client = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIClassifierClient":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.classification_temperature,
            image_detail=settings.image_detail,
            base_url=settings.openai_base_url,
        )

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise ClassificationServiceFailure(
                    "OpenAI API key not provided. Set OPENAI_API_KEY environment variable."
                )
            from openai import OpenAI

            # Failed calls are never reattempted
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                max_retries=0,
            )
        return self._client

    def classify(self, images: list[str], instructions: str) -> str:
        """
        Send the instructions and page images in one completion request.

        Args:
            images: Base64-encoded PNG pages, in page order.
            instructions: Classification instructions.

        Returns:
            The raw completion text.

        Raises:
            ClassificationServiceFailure: On any API error or empty reply.
        """
        from openai import OpenAIError

        content = build_message_content(instructions, images, detail=self.image_detail)

        logger.info(
            "Requesting classification from %s for %d page(s)", self.model, len(images)
        )
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=[{"role": "user", "content": content}],
            )
        except OpenAIError as e:
            logger.error("Classification request failed: %s", e)
            raise ClassificationServiceFailure(
                f"Classification request failed: {e}"
            ) from e

        if not response.choices or not response.choices[0].message.content:
            raise ClassificationServiceFailure("Empty response from OpenAI")

        return response.choices[0].message.content
