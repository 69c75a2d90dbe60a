"""Streaming CSV manifest of download outcomes."""

import csv
from pathlib import Path
from typing import TextIO

from .models import DownloadOutcome


class ResultWriter:
    """Streaming CSV writer with immediate flush to disk.

    Appends to an existing manifest so repeated runs build one history;
    the header is written only when the file is new or empty.
    """

    def __init__(self, filepath: Path):
        self.filepath = Path(filepath)
        self._file: TextIO | None = None
        self._writer = None
        self._count = 0

    def __enter__(self) -> "ResultWriter":
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        is_new = not self.filepath.exists() or self.filepath.stat().st_size == 0
        self._file = open(self.filepath, "a", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        if is_new:
            self._writer.writerow(DownloadOutcome.csv_headers())
            self._file.flush()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._file:
            self._file.close()

    def write(self, key: str, outcome: DownloadOutcome) -> None:
        """Write a single outcome to CSV and flush immediately."""
        if self._writer is None:
            raise RuntimeError("Writer not initialized. Use with context manager.")
        self._writer.writerow(outcome.to_csv_row(key))
        self._file.flush()
        self._count += 1

    @property
    def count(self) -> int:
        """Return number of outcomes written."""
        return self._count
