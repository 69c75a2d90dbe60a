"""Pipeline orchestration: enumerate keys, cache searches, download PDFs."""

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Iterable

from .cache import ResultCache
from .config import DEFAULT_ALPHABET, HarvestConfig
from .downloader import PDFDownloader
from .errors import StoreError
from .keys import make_key_source
from .links import extract_pdf_links
from .models import CacheLookup, DownloadOutcome, RunSummary
from .search import SearchClient
from .store import ResourceStore

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[str, DownloadOutcome], None]
KeyCallback = Callable[[str, CacheLookup | None], None]


class Harvester:
    """Drives keys through search, cache, link extraction and download.

    With ``workers == 1`` every key is resolved and each of its links
    downloaded before the next key starts. With more workers, keys are
    resolved on the calling thread and downloads run on a thread pool with
    at most ``queue_size`` links waiting.

    Links are deduplicated across keys for the life of this object only; the
    downloader's existence check is what prevents repeats across runs.
    """

    def __init__(
        self,
        config: HarvestConfig,
        client: SearchClient | None = None,
        downloader: PDFDownloader | None = None,
        store: ResourceStore | None = None,
    ):
        self.config = config.validate()
        self.store = store or ResourceStore()
        self.client = client or SearchClient(
            config.search_url, timeout=config.http_timeout, delay=config.search_delay
        )
        self.cache = ResultCache(
            self.client, self.store, config.cache_dir, config.alphabet or DEFAULT_ALPHABET
        )
        self.downloader = downloader or PDFDownloader(
            config.download_dir, self.store, timeout=config.http_timeout
        )
        self.stop_event = threading.Event()
        self.summary = RunSummary()
        self._seen: set[str] = set()

    def __enter__(self) -> "Harvester":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.client.close()
        self.downloader.close()

    def bootstrap(self):
        """Create the cache and download directories."""
        for directory in (self.config.cache_dir, self.config.download_dir):
            try:
                self.store.create_if_absent(directory)
            except StoreError as e:
                logger.error("%s", e)

    def keys(self) -> Iterable[str]:
        return make_key_source(self.config.strategy, self.config.alphabet, self.config.count)

    def stop(self):
        """Stop resolving new keys; downloads not yet started are dropped."""
        self.stop_event.set()

    # Stages

    def resolve_key(self, key: str) -> CacheLookup | None:
        self.summary.keys += 1
        lookup = self.cache.get_or_fetch(key)
        if lookup is None or lookup.search_failed:
            self.summary.search_failures += 1
        elif lookup.from_cache:
            self.summary.cache_hits += 1
        else:
            self.summary.searches += 1
        return lookup

    def extract_links(self, lookup: CacheLookup | None) -> list[str]:
        """PDF links in a cached body not yet seen during this run."""
        if lookup is None:
            return []
        links = [url for url in extract_pdf_links(lookup.text) if url not in self._seen]
        self._seen.update(links)
        self.summary.links += len(links)
        if links:
            logger.info("Key %r: %d new PDF link(s)", lookup.key, len(links))
        return links

    def download_link(self, url: str) -> DownloadOutcome:
        return self.downloader.download(url, self.config.download_dir)

    def _record(self, key: str, outcome: DownloadOutcome, on_outcome: OutcomeCallback | None):
        self.summary.record(outcome)
        if on_outcome:
            on_outcome(key, outcome)

    # Runs

    def run(
        self,
        keys: Iterable[str] | None = None,
        on_outcome: OutcomeCallback | None = None,
        on_key: KeyCallback | None = None,
    ) -> RunSummary:
        """Process every key (or until stop() is called)."""
        if keys is None:
            keys = self.keys()
        if self.config.workers <= 1:
            self._run_sequential(keys, on_outcome, on_key)
        else:
            self._run_pooled(keys, on_outcome, on_key)
        logger.info("Run finished. %s", self.summary.summary())
        return self.summary

    def _run_sequential(self, keys, on_outcome, on_key):
        for key in keys:
            if self.stop_event.is_set():
                break
            lookup = self.resolve_key(key)
            for url in self.extract_links(lookup):
                self._record(key, self.download_link(url), on_outcome)
            if on_key:
                on_key(key, lookup)

    def _run_pooled(self, keys, on_outcome, on_key):
        pending: dict[Future, tuple[str, str]] = {}

        def collect(timeout=None):
            done, _ = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
            for future in done:
                key, url = pending.pop(future)
                if future.cancelled():
                    continue
                try:
                    outcome = future.result()
                except Exception:
                    logger.exception("Unexpected error downloading %s", url)
                    continue
                self._record(key, outcome, on_outcome)

        with ThreadPoolExecutor(
            max_workers=self.config.workers, thread_name_prefix="download"
        ) as executor:
            try:
                for key in keys:
                    if self.stop_event.is_set():
                        break
                    lookup = self.resolve_key(key)
                    for url in self.extract_links(lookup):
                        while len(pending) >= self.config.queue_size:
                            collect()
                        pending[executor.submit(self.download_link, url)] = (key, url)
                    if pending:
                        collect(timeout=0)
                    if on_key:
                        on_key(key, lookup)
                if self.stop_event.is_set():
                    for future in pending:
                        future.cancel()
                while pending:
                    collect()
            except BaseException:
                self.stop()
                for future in pending:
                    future.cancel()
                raise
