"""Configuration constants for the safety data sheet harvester."""

import string
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

# Search endpoint (key is appended as the single query parameter)
SEARCH_URL = "https://www.hillyard.com/safetydatasheet/search/results"

# Resource matching
PDF_SUFFIX = ".pdf"
PDF_CONTENT_TYPE = "application/pdf"

# Key alphabets
LETTERS = string.ascii_lowercase
DEFAULT_ALPHABET = string.digits + string.ascii_lowercase

# Key strategies
STRATEGIES = ("exhaustive", "random", "forever")
DEFAULT_STRATEGY = "exhaustive"
DEFAULT_RANDOM_COUNT = 100

# Timeouts (seconds)
TIMEOUTS = {
    "search": 30,
    "download": 30,
}

# Rate limiting (seconds)
DELAYS = {
    "search": 0.0,
}

# Concurrency
DEFAULT_WORKERS = 1
DEFAULT_QUEUE_SIZE = 64

# Output paths (relative to the working directory)
CACHE_DIR = Path("assets")
PDFS_DIR = Path("PDFs")
DIR_MODE = 0o755


@dataclass
class HarvestConfig:
    """Settings for one harvesting run."""

    cache_dir: Path = CACHE_DIR
    download_dir: Path = PDFS_DIR
    http_timeout: float = TIMEOUTS["download"]
    alphabet: str | None = None  # None picks the strategy default
    search_url: str = SEARCH_URL
    search_delay: float = DELAYS["search"]
    strategy: str = DEFAULT_STRATEGY
    count: int = DEFAULT_RANDOM_COUNT
    workers: int = DEFAULT_WORKERS
    queue_size: int = DEFAULT_QUEUE_SIZE

    def __post_init__(self):
        self.cache_dir = Path(self.cache_dir)
        self.download_dir = Path(self.download_dir)

    def validate(self) -> "HarvestConfig":
        """Raise ConfigError if any option is out of range."""
        if self.strategy not in STRATEGIES:
            raise ConfigError(
                f"Unknown key strategy {self.strategy!r} (expected one of {', '.join(STRATEGIES)})"
            )
        if self.alphabet is not None and not self.alphabet:
            raise ConfigError("Alphabet must not be empty")
        unsafe = [c for c in self.alphabet or "" if c not in DEFAULT_ALPHABET]
        if unsafe:
            raise ConfigError(f"Alphabet contains characters unsafe for filenames: {''.join(unsafe)!r}")
        if self.http_timeout <= 0:
            raise ConfigError("HTTP timeout must be positive")
        if self.search_delay < 0:
            raise ConfigError("Search delay must not be negative")
        if self.count < 0:
            raise ConfigError("Key count must not be negative")
        if self.workers < 1:
            raise ConfigError("Worker count must be at least 1")
        if self.queue_size < 1:
            raise ConfigError("Queue size must be at least 1")
        return self
