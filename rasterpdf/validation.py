import io
from collections import namedtuple

from loguru import logger
from pypdf import PdfReader
from pypdf.errors import PdfReadError

PageCountResult = namedtuple('PageCountResult', ['is_valid', 'page_count', 'error'])


def validate_pdf_page_count(pdf_bytes, expected_pages=1):
    """
    Check that a PDF has exactly `expected_pages` pages.

    Certificates uploaded alongside publications must be a single page, and generated
    documents can be checked the same way before they are saved.
    Never raises on a broken PDF, that is reported through `error`.
    """
    try:
        page_count = len(PdfReader(io.BytesIO(pdf_bytes)).pages)
    except (PdfReadError, ValueError, OSError) as e:
        logger.warning(f"Could not read PDF for page count validation: {e}")
        return PageCountResult(False, 0, 'Unable to determine PDF page count. Please ensure your PDF is valid.')

    if page_count < 1:
        return PageCountResult(False, 0, 'Unable to determine PDF page count. Please ensure your PDF is valid.')

    if page_count != expected_pages:
        return PageCountResult(False, page_count,
                               f'PDF must have exactly {expected_pages} page(s). Your PDF has {page_count} pages.')

    return PageCountResult(True, page_count, None)
