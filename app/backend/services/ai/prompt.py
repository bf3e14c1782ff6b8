"""
Prompt construction for document classification.

Builds the single instruction block sent with every request and the
multimodal message content carrying the page images in page order.
"""

import json

from ...models import DocumentType, allowed_document_types

# Identifier fields each document type is expected to fill in
REQUIRED_FIELDS: dict[DocumentType, tuple[str, ...]] = {
    DocumentType.SCOPE: (
        "PolicyNumber",
        "ClaimNumber",
        "InsuredName",
        "InsuredPhone",
        "InsuredEmail",
        "LossLocationAddress",
        "Carrier",
    ),
    DocumentType.QUICK_MEASURE: ("LossLocationAddress",),
    DocumentType.EAGLE_VIEW: ("LossLocationAddress",),
    DocumentType.CHECK: ("ClaimNumber",),
    DocumentType.CORRESPONDENCE: ("ClaimNumber", "PolicyNumber"),
    DocumentType.LETTER_OF_REPRESENTATION: ("ClaimNumber", "PolicyNumber"),
}
REQUIRED_FIELDS[DocumentType.ESTIMATE] = REQUIRED_FIELDS[DocumentType.SCOPE]
REQUIRED_FIELDS[DocumentType.INTAKE] = REQUIRED_FIELDS[DocumentType.SCOPE]

IDENTIFIER_SHAPE = {
    "PolicyNumber": "<Policy Number if available>",
    "ClaimNumber": "<Claim Number if available>",
    "InsuredName": "<Insured Name if available>",
    "InsuredPhone": "<Insured Phone if available>",
    "InsuredEmail": "<Insured Email if available>",
    "LossLocationAddress": "<Loss Location Address if available>",
    "Carrier": "<Carrier/Insurance Company Name if available>",
}


def _required_fields_text(types: tuple[DocumentType, ...]) -> str:
    """Group document types sharing the same required fields into bullet lines."""
    grouped: dict[tuple[str, ...], list[str]] = {}
    for doc_type in types:
        fields = REQUIRED_FIELDS.get(doc_type)
        if fields:
            grouped.setdefault(fields, []).append(doc_type.value)

    return "\n".join(
        f"   - **{', '.join(names)}:** {', '.join(fields)}"
        for fields, names in grouped.items()
    )


def build_instructions(
    estimate_author: str = "AdjustPro Solutions LLC",
    include_letter_of_representation: bool = False,
) -> str:
    """
    Build the classification instructions sent ahead of the page images.

    Args:
        estimate_author: Company whose estimates are classified as Estimate;
            estimates by anyone else are classified as Scope.
        include_letter_of_representation: Offer the optional
            "Letter Of Representation" category.

    Returns:
        The instruction text.
    """
    types = allowed_document_types(include_letter_of_representation)
    type_names = ", ".join(t.value for t in types)

    output_shape = {
        "DocumentType": f"<One of: {type_names}>",
        "Identifier": IDENTIFIER_SHAPE,
    }

    return f"""You are a document classifier and data extractor. The images provided represent sequential pages of a document. Follow these instructions precisely:

1. **Initial Scan:** Begin by analyzing only the first two pages (images). Determine the document type from these pages.
2. **Data Extraction:** Based on the identified document type, extract only the required data points as listed below:

{_required_fields_text(types)}

   **Special Note:** If an estimate was written by "{estimate_author}", set DocumentType to "Estimate". If an estimate is identified but not written by {estimate_author}, set DocumentType to "Scope".

3. **Stop Condition:** Use as few pages as necessary.
   - If all required fields for the determined document type are found within the first two pages, ignore any additional pages and immediately respond with the results.
   - If some required fields are missing, continue scanning subsequent pages only until all required data is obtained (or until no more pages remain).

4. **Fallback:** If the document cannot be clearly identified, set DocumentType to "Unidentifiable" and Identifier to null.

5. **Response Format:** Return your answer strictly in the following JSON format without any additional commentary:

{json.dumps(output_shape, indent=2)}

Additional Notes:
- Set any field that is not required for the document type, or cannot be found, to null.
- If no identifier can be extracted, set "Identifier" to null.
- Do not include any extra text or explanation, only the JSON structure exactly as shown.

Proceed with the extraction based on these instructions."""


def build_message_content(
    instructions: str,
    images: list[str],
    detail: str = "high",
) -> list[dict]:
    """
    Build the user message content: instructions first, then every page.

    Args:
        instructions: Text from build_instructions.
        images: Base64-encoded PNG pages, in page order.
        detail: OpenAI image detail level.

    Returns:
        Content parts for a chat completions user message.
    """
    content: list[dict] = [{"type": "text", "text": instructions}]
    for base64_img in images:
        content.append({
            "type": "image_url",
            "image_url": {
                "url": f"data:image/png;base64,{base64_img}",
                "detail": detail,
            },
        })
    return content
