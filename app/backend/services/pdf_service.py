"""
PDF processing service using pdf2image (poppler).

Persists uploaded PDFs to the uploads directory, renders each page to a
PNG under a request-scoped images directory, and removes both afterwards.
"""

import base64
import logging
import shutil
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

# PDF user space unit; render_scale multiplies it into a DPI
POINTS_PER_INCH = 72

# How far into an upload the %PDF header may appear
PDF_HEADER_SEARCH_BYTES = 1024


class PDFConversionError(Exception):
    """Raised when PDF conversion fails."""

    pass


class EmptyDocumentError(PDFConversionError):
    """Raised when a PDF yields no pages to classify."""

    pass


@dataclass(frozen=True)
class PageImage:
    """A rendered page, numbered from 1 in document order."""

    page_number: int
    path: Path
    base64: str


class PDFService:
    """
    Service for PDF processing operations.

    Uses pdf2image (backed by poppler) to convert PDF pages to images.
    """

    def __init__(
        self,
        upload_dir: Path | str = "uploads",
        render_scale: int = 3,
        image_format: str = "PNG",
    ):
        """
        Initialize the PDF service.

        Args:
            upload_dir: Directory receiving uploaded PDFs. Rendered pages go
                to its ``images`` subdirectory.
            render_scale: Multiple of 72 DPI to render at. Higher = better
                quality but slower.
            image_format: Output image format (PNG recommended for quality).
        """
        self.upload_dir = Path(upload_dir)
        self.images_dir = self.upload_dir / "images"
        self.render_scale = render_scale
        self.image_format = image_format

    @classmethod
    def from_settings(cls, settings: Settings) -> "PDFService":
        return cls(upload_dir=settings.upload_dir, render_scale=settings.render_scale)

    @property
    def dpi(self) -> int:
        return POINTS_PER_INCH * self.render_scale

    def upload_path(self, request_id: str) -> Path:
        return self.upload_dir / f"{request_id}.pdf"

    def request_images_dir(self, request_id: str) -> Path:
        return self.images_dir / request_id

    def save_upload(self, file_bytes: bytes, request_id: str) -> Path:
        """
        Persist an uploaded PDF so the rasterizer can read it from disk.

        Args:
            file_bytes: Raw upload content.
            request_id: Unique id scoping this request's files.

        Returns:
            Path of the written PDF.

        Raises:
            PDFConversionError: If the content is empty or not a PDF.
        """
        if not file_bytes:
            raise PDFConversionError("Empty PDF file provided")

        # Validate PDF magic bytes; poppler tolerates junk before the header
        if b"%PDF" not in file_bytes[:PDF_HEADER_SEARCH_BYTES]:
            raise PDFConversionError(
                "Invalid PDF file: no PDF header found"
            )

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        pdf_path = self.upload_path(request_id)
        pdf_path.write_bytes(file_bytes)
        logger.info("Saved upload to %s (%d bytes)", pdf_path, len(file_bytes))
        return pdf_path

    def iter_page_images(self, pdf_path: Path) -> Iterator[Image.Image]:
        """
        Lazily render the pages of a PDF, one at a time, in page order.

        Args:
            pdf_path: Path to the PDF on local storage.

        Yields:
            One PIL Image per page, starting with page 1.

        Raises:
            PDFConversionError: If the PDF cannot be read or rendered.
        """
        try:
            # Import here to provide clear error if poppler not installed
            from pdf2image import convert_from_path, pdfinfo_from_path
            from pdf2image.exceptions import (
                PDFInfoNotInstalledError,
                PDFPageCountError,
                PDFSyntaxError,
            )
        except ImportError as e:
            logger.error("pdf2image not installed: %s", e)
            raise PDFConversionError(
                "pdf2image library not installed. Run: pip install pdf2image"
            ) from e

        try:
            page_count = pdfinfo_from_path(str(pdf_path)).get("Pages", 0)
            logger.info(
                "Rendering %d page(s) of %s (dpi=%d)", page_count, pdf_path, self.dpi
            )

            for page_number in range(1, page_count + 1):
                rendered = convert_from_path(
                    str(pdf_path),
                    dpi=self.dpi,
                    fmt=self.image_format.lower(),
                    first_page=page_number,
                    last_page=page_number,
                )
                yield from rendered

        except PDFInfoNotInstalledError as e:
            logger.error("Poppler not installed: %s", e)
            raise PDFConversionError(
                "Poppler not installed. Install poppler-utils: "
                "brew install poppler (macOS) or apt-get install poppler-utils (Linux)"
            ) from e

        except PDFPageCountError as e:
            logger.error("Could not get PDF page count: %s", e)
            raise PDFConversionError(
                f"Could not determine PDF page count: {e}"
            ) from e

        except PDFSyntaxError as e:
            logger.error("PDF syntax error: %s", e)
            raise PDFConversionError(f"Invalid or corrupted PDF file: {e}") from e

        except Exception as e:
            logger.exception("Unexpected error during PDF conversion")
            raise PDFConversionError(f"PDF conversion failed: {e}") from e

    def convert_pdf_to_page_images(
        self, pdf_path: Path, request_id: str
    ) -> list[PageImage]:
        """
        Render every page to disk and collect its base64 encoding.

        Args:
            pdf_path: Path to the saved upload.
            request_id: Unique id scoping this request's files.

        Returns:
            PageImage list ordered by page number.

        Raises:
            PDFConversionError: If rendering or writing a page fails.
            EmptyDocumentError: If the PDF has no pages.
        """
        output_dir = self.request_images_dir(request_id)
        output_dir.mkdir(parents=True, exist_ok=True)

        pages: list[PageImage] = []
        for page_number, image in enumerate(self.iter_page_images(pdf_path), start=1):
            image_path = output_dir / f"page{page_number}.{self.image_format.lower()}"
            try:
                image.save(image_path, format=self.image_format)
                encoded = base64.b64encode(image_path.read_bytes()).decode("utf-8")
            except OSError as e:
                logger.error("Could not write page %d: %s", page_number, e)
                raise PDFConversionError(
                    f"Could not write page {page_number}: {e}"
                ) from e
            pages.append(PageImage(page_number, image_path, encoded))

        if not pages:
            raise EmptyDocumentError("PDF contains no pages")

        logger.info("Converted %d page(s) from %s", len(pages), pdf_path)
        return pages

    def cleanup(self, pdf_path: Path | None, request_id: str) -> None:
        """Remove a request's upload and rendered pages, logging any failure."""
        if pdf_path is not None:
            try:
                pdf_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove upload %s: %s", pdf_path, e)

        images_dir = self.request_images_dir(request_id)
        if images_dir.exists():
            try:
                shutil.rmtree(images_dir)
            except OSError as e:
                logger.warning("Could not remove %s: %s", images_dir, e)


def get_pdf_service() -> PDFService:
    """FastAPI dependency building the PDF service from settings."""
    return PDFService.from_settings(get_settings())
