"""Fetch-once cache of search responses, one file per key."""

import logging
from pathlib import Path

from .config import CACHE_DIR, DEFAULT_ALPHABET
from .errors import StoreError, TransportError
from .keys import is_valid_key
from .models import CacheLookup
from .search import SearchClient
from .store import ResourceStore

logger = logging.getLogger(__name__)


class ResultCache:
    """Wraps a SearchClient so each key is searched at most once.

    An entry that exists is a hit even when empty or malformed; there is no
    expiry and no invalidation. A failed search is cached as an empty entry,
    so that key is never searched again.
    """

    def __init__(
        self,
        client: SearchClient,
        store: ResourceStore,
        cache_dir: Path = CACHE_DIR,
        alphabet: str = DEFAULT_ALPHABET,
    ):
        self.client = client
        self.store = store
        self.cache_dir = Path(cache_dir)
        self.alphabet = alphabet

    def cache_path(self, key: str) -> Path:
        if not is_valid_key(key, self.alphabet):
            raise ValueError(f"Key {key!r} is not 1-2 symbols from {self.alphabet!r}")
        return self.cache_dir / f"{key}.json"

    def get_or_fetch(self, key: str) -> CacheLookup | None:
        """Return the cached body for key, searching only on a miss."""
        path = self.cache_path(key)
        with self.store.lock_for(path):
            if self.store.exists(path):
                try:
                    body = self.store.read(path)
                except StoreError as e:
                    logger.warning("Cache entry for %r unreadable: %s", key, e)
                    return None
                logger.debug("Cache hit for %r", key)
                return CacheLookup(key=key, body=body, from_cache=True)

            failed = False
            try:
                body = self.client.fetch(key)
            except TransportError as e:
                logger.warning("%s; caching an empty result", e)
                body, failed = b"", True

            entry = body + b"\n"
            try:
                self.store.write_once_append(path, entry)
            except StoreError as e:
                logger.warning("Could not cache response for %r: %s", key, e)
                return None

        if not failed:
            logger.info("Cached search results for %r (%d bytes)", key, len(body))
        return CacheLookup(key=key, body=entry, from_cache=False, search_failed=failed)
