"""PDF text extraction.

A :data:`TextExtractor` is any callable ``bytes -> str``. The default,
:class:`PdfPlumberExtractor`, reads the embedded text layer page by page
with ``pdfplumber`` and prefixes each page with ``=== PAGE n ===`` so that
downstream parsing can tell page boundaries from statement content. OCR for
image-only PDFs is a pluggable concern: pass any extractor with the same
signature.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import pdfplumber

from ..config import get_max_pdf_pages, get_pdf_page_timeout
from ..errors import ExtractionError
from ..logging_setup import get_logger

_logger = get_logger("finance_tracker.ingest.pdf")

type TextExtractor = Callable[[bytes], str]

PAGE_MARKER = "=== PAGE {n} ==="


class PdfPlumberExtractor:
    """Extract the text layer of a PDF with a page cap and a per-page timeout.

    Parameters
    ----------
    max_pages:
        Reject documents with more pages than this. Defaults to
        ``FT_MAX_PDF_PAGES`` (50).
    page_timeout:
        Seconds allowed per page. Defaults to ``FT_PDF_PAGE_TIMEOUT_SEC`` (30).
    """

    def __init__(self, *, max_pages: int | None = None, page_timeout: float | None = None) -> None:
        self.max_pages = max_pages if max_pages is not None else get_max_pdf_pages()
        self.page_timeout = page_timeout if page_timeout is not None else get_pdf_page_timeout()

    def __call__(self, content: bytes) -> str:
        try:
            pdf = pdfplumber.open(io.BytesIO(content))
        except Exception as e:  # pdfminer raises a zoo of parser errors
            raise ExtractionError(
                "Could not extract text from PDF. The file may be image-based or have an "
                "unusual format."
            ) from e
        with pdf:
            page_count = len(pdf.pages)
            if page_count > self.max_pages:
                raise ExtractionError(
                    f"PDF has {page_count} pages; at most {self.max_pages} are supported."
                )
            parts = [self._extract_page(page, n) for n, page in enumerate(pdf.pages, start=1)]
        _logger.info("pdf:extracted pages=%d chars=%d", page_count, sum(len(p) for p in parts))
        return "\n".join(parts)

    def _extract_page(self, page: object, n: int) -> str:
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ft-pdf")
        try:
            future = pool.submit(page.extract_text)  # type: ignore[attr-defined]
            try:
                text = future.result(timeout=self.page_timeout)
            except FutureTimeoutError as e:
                raise ExtractionError(
                    f"Timed out extracting text from PDF page {n} after {self.page_timeout:g}s."
                ) from e
            except Exception as e:
                raise ExtractionError(f"Could not extract text from PDF page {n}.") from e
        finally:
            # A stuck page must not block the caller.
            pool.shutdown(wait=False, cancel_futures=True)
        return f"{PAGE_MARKER.format(n=n)}\n{text or ''}"


__all__ = ["PAGE_MARKER", "PdfPlumberExtractor", "TextExtractor"]
