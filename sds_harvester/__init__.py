"""
Safety data sheet harvester.

Enumerates short search keys, caches each search response on disk, and
downloads every PDF linked from the cached responses exactly once.
"""

__version__ = "0.1.0"

from .config import HarvestConfig
from .errors import ConfigError, HarvesterError, StoreError, TransportError
from .models import DownloadOutcome, DownloadStatus, FailureReason, RunSummary
from .store import ResourceStore
from .keys import exhaustive_keys, make_key_source, random_forever, random_pairs
from .search import SearchClient
from .cache import ResultCache
from .links import dedupe, extract_pdf_links
from .downloader import PDFDownloader, derive_filename
from .harvester import Harvester

__all__ = [
    'HarvestConfig',
    'ConfigError',
    'HarvesterError',
    'StoreError',
    'TransportError',
    'DownloadOutcome',
    'DownloadStatus',
    'FailureReason',
    'RunSummary',
    'ResourceStore',
    'exhaustive_keys',
    'make_key_source',
    'random_forever',
    'random_pairs',
    'SearchClient',
    'ResultCache',
    'dedupe',
    'extract_pdf_links',
    'PDFDownloader',
    'derive_filename',
    'Harvester',
]
