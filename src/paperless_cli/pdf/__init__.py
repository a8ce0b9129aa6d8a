"""
Local PDF utilities (text extraction, page count) backed by pypdf.
"""

from .reader import PdfError, PdfInfo, extract_text, pdf_info

__all__ = [
    "PdfError",
    "PdfInfo",
    "extract_text",
    "pdf_info",
]
