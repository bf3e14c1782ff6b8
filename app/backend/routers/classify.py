"""
Router for the document classification endpoint.

Handles:
- PDF upload, page rendering, and classification in one request
"""

import logging
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile as StarletteUploadFile

from ..models import ClassificationResult, ErrorResponse
from ..services.ai import AIServiceError, ClassificationService, get_classification_service
from ..services.pdf_service import PDFConversionError, PDFService, get_pdf_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["classification"])

NO_FILE_MESSAGE = "No PDF file provided!"
UNEXPECTED_ERROR_MESSAGE = "An error occurred while processing the PDF."


@router.post(
    "/convert-pdf",
    response_model=ClassificationResult,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def convert_pdf(
    data: UploadFile | str | None = File(None, description="PDF file to classify"),
    pdf_service: PDFService = Depends(get_pdf_service),
    classifier: ClassificationService = Depends(get_classification_service),
):
    """
    Classify an uploaded insurance document.

    Renders every page of the PDF, sends the ordered page images to the
    classification service once, and returns the validated result. The
    upload and rendered pages are removed before responding.
    """
    # A missing field or a plain text value both mean no file was uploaded
    if not isinstance(data, StarletteUploadFile):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": NO_FILE_MESSAGE},
        )

    request_id = uuid.uuid4().hex
    pdf_path: Path | None = None

    try:
        file_bytes = await data.read()
        if not file_bytes:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"message": NO_FILE_MESSAGE},
            )

        logger.info(
            "Processing PDF: %s (%d bytes, request %s)",
            data.filename,
            len(file_bytes),
            request_id,
        )

        pdf_path = await run_in_threadpool(pdf_service.save_upload, file_bytes, request_id)
        pages = await run_in_threadpool(
            pdf_service.convert_pdf_to_page_images, pdf_path, request_id
        )
        result = await run_in_threadpool(classifier.classify, pages)

        logger.info("Images saved and processed: %d pages", len(pages))
        return result

    except (PDFConversionError, AIServiceError):
        # Mapped to error responses by the handlers in main
        raise
    except Exception:
        logger.exception("Unexpected error processing PDF")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": UNEXPECTED_ERROR_MESSAGE},
        )
    finally:
        await run_in_threadpool(pdf_service.cleanup, pdf_path, request_id)
        await data.close()
