"""Search key enumeration strategies.

Each strategy is a generator of short keys over a fixed alphabet. Random
draws come from ``secrets`` so the order in which keys hit the search
endpoint cannot be predicted by its rate limiter.
"""

import secrets
from itertools import chain, product
from typing import Iterator

from .config import DEFAULT_ALPHABET, DEFAULT_RANDOM_COUNT, LETTERS, STRATEGIES
from .errors import ConfigError


def _unique_symbols(alphabet: str) -> str:
    return "".join(dict.fromkeys(alphabet))


def is_valid_key(key: str, alphabet: str = DEFAULT_ALPHABET) -> bool:
    """Check that key is 1-2 symbols drawn from alphabet."""
    return 1 <= len(key) <= 2 and all(c in alphabet for c in key)


def random_key(alphabet: str = LETTERS) -> str:
    """Draw one two-symbol key."""
    return secrets.choice(alphabet) + secrets.choice(alphabet)


def random_pairs(count: int = DEFAULT_RANDOM_COUNT, alphabet: str = LETTERS) -> Iterator[str]:
    """Yield count random two-symbol keys (repeats possible)."""
    alphabet = _unique_symbols(alphabet)
    for _ in range(count):
        yield random_key(alphabet)


def random_forever(alphabet: str = LETTERS) -> Iterator[str]:
    """Yield random two-symbol keys without end.

    Work stays bounded because already-cached keys cost no search.
    """
    alphabet = _unique_symbols(alphabet)
    while True:
        yield random_key(alphabet)


def exhaustive_keys(alphabet: str = DEFAULT_ALPHABET) -> Iterator[str]:
    """Yield every single symbol, then every ordered pair, without repeats."""
    alphabet = _unique_symbols(alphabet)
    seen = set()
    singles = iter(alphabet)
    pairs = ("".join(pair) for pair in product(alphabet, repeat=2))
    for key in chain(singles, pairs):
        if key not in seen:
            seen.add(key)
            yield key


def key_space_size(strategy: str, alphabet: str | None = None, count: int = DEFAULT_RANDOM_COUNT) -> int | None:
    """Number of keys a strategy yields, or None when unbounded."""
    if strategy == "exhaustive":
        n = len(_unique_symbols(alphabet or DEFAULT_ALPHABET))
        return n + n * n
    if strategy == "random":
        return count
    if strategy == "forever":
        return None
    raise ConfigError(f"Unknown key strategy: {strategy!r}")


def make_key_source(
    strategy: str, alphabet: str | None = None, count: int = DEFAULT_RANDOM_COUNT
) -> Iterator[str]:
    """Build the key generator for a strategy name."""
    if strategy not in STRATEGIES:
        raise ConfigError(f"Unknown key strategy: {strategy!r}")
    if strategy == "exhaustive":
        return exhaustive_keys(alphabet or DEFAULT_ALPHABET)
    if strategy == "random":
        return random_pairs(count, alphabet or LETTERS)
    return random_forever(alphabet or LETTERS)
