"""One-line run status for bounded harvests."""

import sys

from .models import RunSummary


def format_duration(seconds: float) -> str:
    """Render seconds as M:SS, or H:MM:SS from one hour up."""
    total = max(0, int(round(seconds)))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class ProgressBar:
    """
    Redraws a single status line from a RunSummary snapshot.

    The line shows keys done against the key space, how each key was
    resolved (cache hit, fresh search, failed search) and what happened
    to every PDF link so far.
    """

    def __init__(self, total: int, width: int = 20, stream=None):
        self.total = total
        self.width = width
        self.stream = stream or sys.stdout
        self._drawn = 0

    def render(self, summary: RunSummary, elapsed: float) -> str:
        done = min(summary.keys, self.total)
        fraction = done / self.total if self.total else 1.0
        filled = int(self.width * fraction)
        bar = "#" * filled + "-" * (self.width - filled)

        if done and elapsed > 0:
            eta = format_duration((self.total - done) * elapsed / done)
        else:
            eta = "?"

        return (
            f"[{bar}] {done}/{self.total} {fraction:4.0%} "
            f"| keys: {summary.cache_hits} cached, {summary.searches} searched, "
            f"{summary.search_failures} failed "
            f"| pdfs: {summary.downloaded} new, {summary.skipped} skipped, {summary.failed} failed "
            f"| {format_duration(elapsed)} elapsed, eta {eta}"
        )

    def update(self, summary: RunSummary, elapsed: float) -> None:
        line = self.render(summary, elapsed)
        # pad over leftovers of a longer previous line
        padding = " " * max(0, self._drawn - len(line))
        self.stream.write(f"\r{line}{padding}")
        self.stream.flush()
        self._drawn = len(line)

    def finish(self) -> None:
        if self._drawn:
            self.stream.write("\n")
            self.stream.flush()
            self._drawn = 0
