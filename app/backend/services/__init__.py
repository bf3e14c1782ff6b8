"""
Services package for the document classification application.

Contains:
- pdf_service: PDF to page image conversion and request file cleanup
- ai: Classification prompt, OpenAI client, and reply validation
"""

from .ai import ClassificationService
from .pdf_service import PDFService

__all__ = ["PDFService", "ClassificationService"]
