"""
Shared exceptions for AI service modules.
"""


class AIServiceError(Exception):
    """Raised when AI service operations fail."""

    pass


class ClassificationServiceFailure(AIServiceError):
    """Raised when the call to the classification service itself fails."""

    pass


class MalformedResponseError(AIServiceError):
    """Raised when the classification reply is not a JSON object."""

    pass


class SchemaValidationError(AIServiceError):
    """Raised when the classification reply does not match the result schema."""

    pass
