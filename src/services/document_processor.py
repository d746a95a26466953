"""
PDF text extraction for the study-text box.
"""

from __future__ import annotations

import io
import logging
from typing import Any

from pypdf import PdfReader

from utils.file_utils import read_upload_bytes

LOGGER = logging.getLogger("testme.pdf")


class PageRangeError(ValueError):
    """Raised when a requested page range does not fit the document."""


def _page_items(page: Any) -> list[str]:
    """Collect the text runs pypdf reports for one page, in content-stream order."""
    items: list[str] = []

    def visitor(text: str, *_args: Any) -> None:
        fragment = text.strip()
        if fragment:
            items.append(fragment)

    page.extract_text(visitor_text=visitor)
    return items


class PDFProcessor:
    """Extracts text from a page range of a PDF."""

    def _open(self, data: bytes) -> PdfReader:
        if not data:
            raise ValueError("File is empty and cannot be processed.")
        try:
            return PdfReader(io.BytesIO(data))
        except Exception as e:
            raise ValueError(f"Unable to parse PDF (possibly corrupted): {e!s}") from e

    def page_count(self, data: bytes) -> int:
        """Return the number of pages in the PDF bytes."""
        reader = self._open(data)
        try:
            return len(reader.pages)
        except Exception as e:
            raise ValueError(f"Unable to parse PDF (possibly corrupted): {e!s}") from e

    def extract_page_range(self, data: bytes, start_page: int, end_page: int) -> str:
        """
        Extract text from an inclusive, 1-based page range.

        Each page's text runs are joined with single spaces and the page is
        prefixed with a newline; pages are concatenated in ascending order.

        Args:
            data: Raw PDF bytes.
            start_page: First page to read (1-based).
            end_page: Last page to read (inclusive).

        Returns:
            The concatenated page text.

        Raises:
            ValueError: If the file is empty or cannot be parsed.
            PageRangeError: If the range is reversed or outside the document.
        """
        reader = self._open(data)
        try:
            total = len(reader.pages)
        except Exception as e:
            raise ValueError(f"Unable to parse PDF (possibly corrupted): {e!s}") from e

        start, end = int(start_page), int(end_page)
        if start < 1 or end < start or end > total:
            raise PageRangeError(
                f"Invalid page range {start}-{end}: choose pages between 1 and {total} "
                "with the start page not after the end page."
            )

        parts: list[str] = []
        for number in range(start, end + 1):
            try:
                items = _page_items(reader.pages[number - 1])
            except Exception as e:
                raise ValueError(f"Error extracting text from page {number}: {e!s}") from e
            parts.append("\n" + " ".join(items))

        LOGGER.info("Extracted pages %d-%d of %d", start, end, total)
        return "".join(parts)

    def extract_range_from_file(self, uploaded_file: Any, start_page: int, end_page: int) -> str:
        """Read an uploaded file fully into memory and extract the page range."""
        data = read_upload_bytes(uploaded_file)
        return self.extract_page_range(data, start_page, end_page)
