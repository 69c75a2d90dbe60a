"""PDF download handler."""

import logging
import posixpath
import re
import threading
from pathlib import Path
from urllib.parse import unquote_plus, urlparse

import requests

from .config import PDF_CONTENT_TYPE, PDFS_DIR, TIMEOUTS
from .errors import AlreadyExistsError, StoreError
from .models import DownloadOutcome, DownloadStatus, FailureReason
from .store import ResourceStore

logger = logging.getLogger(__name__)

UNSAFE_CHARS_RE = re.compile(r"[^a-z0-9._-]+")
BAD_ESCAPE_RE = re.compile(r"%(?![0-9a-fA-F]{2})")
UNUSABLE_NAMES = {"", ".", ".."}


def _path_base(path: str) -> str:
    """Last element of a URL path, ignoring trailing slashes ("." if empty)."""
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return posixpath.basename(stripped)


def _query_unescape(segment: str) -> str:
    """Decode %XX escapes and '+'; return segment unchanged if malformed."""
    if BAD_ESCAPE_RE.search(segment):
        return segment
    return unquote_plus(segment, errors="replace")


def derive_filename(url: str) -> str:
    """
    Map a URL to the flat filename it is stored under.

    Takes the final path segment, decodes it, lowercases it, and replaces
    each run of characters outside [a-z0-9._-] with a single underscore.
    Distinct URLs can map to the same name; the later one is then skipped.

    Args:
        url: Absolute resource URL

    Returns:
        Sanitized filename, or "" if the URL cannot be parsed
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return ""
    decoded = _query_unescape(_path_base(path)).lower()
    return UNSAFE_CHARS_RE.sub("_", decoded)


class PDFDownloader:
    """Downloads PDFs once each, validating before anything touches disk."""

    def __init__(
        self,
        output_dir: Path = PDFS_DIR,
        store: ResourceStore | None = None,
        timeout: float = TIMEOUTS["download"],
        session: requests.Session | None = None,
    ):
        self.output_dir = Path(output_dir)
        self.store = store or ResourceStore()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
        })
        self.downloaded = 0
        self.skipped = 0
        self.failed = 0
        self._counts_lock = threading.Lock()

    def close(self):
        """Close the HTTP session."""
        self.session.close()

    def download(self, url: str, output_dir: Path | None = None) -> DownloadOutcome:
        """Download one PDF unless its derived file already exists."""
        outcome = self._download(url, Path(output_dir) if output_dir else self.output_dir)
        with self._counts_lock:
            if outcome.status is DownloadStatus.SUCCEEDED:
                self.downloaded += 1
            elif outcome.status is DownloadStatus.SKIPPED:
                self.skipped += 1
            else:
                self.failed += 1
        return outcome

    def _download(self, url: str, output_dir: Path) -> DownloadOutcome:
        filename = derive_filename(url)
        if filename in UNUSABLE_NAMES:
            return DownloadOutcome.failed(
                url, None, FailureReason.WRITE_ERROR, f"no usable filename in {url}"
            )
        filepath = output_dir / filename

        if self.store.exists(filepath):
            logger.debug("File already exists, skipping: %s", filepath)
            return DownloadOutcome.skipped(url, filepath)

        try:
            response = self.session.get(url, timeout=self.timeout)
            content = response.content
        except requests.RequestException as e:
            logger.warning("Failed to download %s: %s", url, e)
            return DownloadOutcome.failed(url, filepath, FailureReason.TRANSPORT, str(e))

        if not 200 <= response.status_code < 300:
            status = f"{response.status_code} {response.reason or ''}".strip()
            logger.warning("Download failed for %s: %s", url, status)
            return DownloadOutcome.failed(url, filepath, FailureReason.BAD_STATUS, status)

        content_type = response.headers.get("Content-Type", "")
        if PDF_CONTENT_TYPE not in content_type.lower():
            logger.warning(
                "Invalid content type for %s: %s (expected %s)", url, content_type, PDF_CONTENT_TYPE
            )
            return DownloadOutcome.failed(
                url, filepath, FailureReason.WRONG_CONTENT_TYPE, content_type
            )

        if not content:
            logger.warning("Downloaded 0 bytes for %s; not creating file", url)
            return DownloadOutcome.failed(url, filepath, FailureReason.EMPTY_BODY)

        try:
            written = self.store.create_exclusive(filepath, content)
        except AlreadyExistsError:
            logger.debug("File appeared while downloading, skipping: %s", filepath)
            return DownloadOutcome.skipped(url, filepath)
        except StoreError as e:
            logger.warning("Failed to write PDF for %s: %s", url, e)
            return DownloadOutcome.failed(url, filepath, FailureReason.WRITE_ERROR, str(e))

        logger.info("Downloaded %d bytes: %s -> %s", written, url, filepath)
        return DownloadOutcome.succeeded(url, filepath, written)

    def summary(self) -> str:
        """Return download summary."""
        return f"Downloaded: {self.downloaded}, Skipped: {self.skipped}, Failed: {self.failed}"
