"""
Insurance Document Classification Backend.

A FastAPI service that classifies uploaded insurance PDFs and extracts
their identifying fields using AI (OpenAI GPT-4o mini).
"""

__version__ = "1.0.0"
