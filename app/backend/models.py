"""
Pydantic models for the document classification endpoint.

Defines the classification result returned to callers, the identifier
fields extracted from each document, and the error/health payloads.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DocumentType(str, Enum):
    """Insurance document categories the classifier may assign."""

    SCOPE = "Scope"
    ESTIMATE = "Estimate"
    QUICK_MEASURE = "Quick Measure"
    EAGLE_VIEW = "Eagle View"
    CHECK = "Check"
    CORRESPONDENCE = "Correspondence"
    IMAGE = "Image"
    INTAKE = "Intake"
    UNIDENTIFIABLE = "Unidentifiable"
    # Only accepted when enabled in settings
    LETTER_OF_REPRESENTATION = "Letter Of Representation"


CORE_DOCUMENT_TYPES: tuple[DocumentType, ...] = tuple(
    t for t in DocumentType if t is not DocumentType.LETTER_OF_REPRESENTATION
)


def allowed_document_types(
    include_letter_of_representation: bool = False,
) -> tuple[DocumentType, ...]:
    """Return the document types a deployment accepts, in prompt order."""
    if include_letter_of_representation:
        return tuple(DocumentType)
    return CORE_DOCUMENT_TYPES


class Identifier(BaseModel):
    """
    Identifying fields extracted from a document.

    Every field is a nullable string. Fields the model omits default to
    null; keys outside this set are dropped.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    policy_number: str | None = Field(default=None, alias="PolicyNumber")
    claim_number: str | None = Field(default=None, alias="ClaimNumber")
    insured_name: str | None = Field(default=None, alias="InsuredName")
    insured_phone: str | None = Field(default=None, alias="InsuredPhone")
    insured_email: str | None = Field(default=None, alias="InsuredEmail")
    loss_location_address: str | None = Field(
        default=None, alias="LossLocationAddress"
    )
    carrier: str | None = Field(
        default=None,
        alias="Carrier",
        description="Carrier/insurance company name",
    )


IDENTIFIER_FIELDS: tuple[str, ...] = tuple(
    field.alias for field in Identifier.model_fields.values()
)


class ClassificationResult(BaseModel):
    """
    Validated classification of a single uploaded document.

    Serialized with the wire names ``DocumentType`` and ``Identifier``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    document_type: DocumentType = Field(..., alias="DocumentType")
    identifier: Identifier | None = Field(..., alias="Identifier")


class ErrorResponse(BaseModel):
    """Error payload returned by the classification endpoint."""

    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(default="1.0.0")
