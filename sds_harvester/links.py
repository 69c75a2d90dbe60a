"""PDF link extraction from raw search response bodies."""

import re
from typing import Iterable

from .config import PDF_SUFFIX

# ASCII whitespace only; Unicode spaces such as \xa0 stay part of a link.
_LINK_CHARS = r"""[^\t\n\f\r "'<>]"""

# Lazy up to the first ".pdf" so trailing text after it is never captured.
PDF_LINK_RE = re.compile(
    rf"https?://{_LINK_CHARS}+?{re.escape(PDF_SUFFIX)}(\?{_LINK_CHARS}*)?"
)


def dedupe(items: Iterable[str]) -> list[str]:
    """Drop repeated items, keeping first-seen order."""
    return list(dict.fromkeys(items))


def extract_pdf_links(body: str) -> list[str]:
    """
    Find all PDF URLs in a response body.

    The body is lowercased before matching, so links come back lowercased
    but otherwise exactly as found (no percent-decoding).

    Args:
        body: Raw response text

    Returns:
        Unique links in order of first occurrence
    """
    return dedupe(m.group(0) for m in PDF_LINK_RE.finditer(body.lower()))
