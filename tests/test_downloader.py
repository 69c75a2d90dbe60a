from pathlib import Path

import pytest
import requests

from sds_harvester.downloader import PDFDownloader, derive_filename
from sds_harvester.errors import StoreError
from sds_harvester.models import DownloadStatus, FailureReason

from conftest import PDF_BYTES


@pytest.fixture
def downloader(tmp_path, session) -> PDFDownloader:
    return PDFDownloader(tmp_path / "PDFs", session=session)


@pytest.fixture(autouse=True)
def _pdf_dir(tmp_path) -> None:
    (tmp_path / "PDFs").mkdir()


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/sheet%20one.pdf?v=2", "sheet_one.pdf"),
        ("https://example.com/sheet_one.pdf", "sheet_one.pdf"),
        ("https://example.com/a/b/Product+Name.PDF", "product_name.pdf"),
        ("https://example.com/docs/%C3%A9t%C3%A9.pdf", "_t_.pdf"),
        ("https://example.com/bad%zzname.pdf", "bad_zzname.pdf"),
        ("https://example.com/x/a%2fb.pdf", "a_b.pdf"),
        ("https://example.com/dir/", "dir"),
        ("https://example.com/a  &  b.pdf", "a_b.pdf"),
    ],
)
def test_derive_filename(url, expected) -> None:
    assert derive_filename(url) == expected


def test_derive_filename_is_deterministic() -> None:
    url = "https://example.com/SDS/Glass%20Cleaner%20(US).pdf?lang=en"
    first = derive_filename(url)
    assert first == "glass_cleaner_us_.pdf"
    assert derive_filename(url) == first
    assert derive_filename(first) == first


def test_download_writes_file(tmp_path, session, downloader) -> None:
    url = "https://example.com/sds/cleaner.pdf"
    session.add_pdf(url)

    outcome = downloader.download(url)

    assert outcome.status is DownloadStatus.SUCCEEDED
    assert outcome.bytes_written == len(PDF_BYTES)
    assert outcome.path == tmp_path / "PDFs" / "cleaner.pdf"
    assert outcome.path.read_bytes() == PDF_BYTES
    assert session.calls[0]["timeout"] == 30


def test_second_download_skips_without_network(session, downloader) -> None:
    url = "https://example.com/sds/cleaner.pdf"
    session.add_pdf(url)

    assert downloader.download(url).status is DownloadStatus.SUCCEEDED
    outcome = downloader.download(url)

    assert outcome.status is DownloadStatus.SKIPPED
    assert outcome.reason is FailureReason.ALREADY_EXISTS
    assert len(session.calls) == 1


def test_download_to_explicit_directory(tmp_path, session, downloader) -> None:
    other = tmp_path / "other"
    other.mkdir()
    url = "https://example.com/a.pdf"
    session.add_pdf(url)

    outcome = downloader.download(url, other)

    assert outcome.path == other / "a.pdf"
    assert outcome.path.exists()


def test_bad_status_creates_no_file(tmp_path, session, downloader) -> None:
    url = "https://example.com/missing.pdf"
    session.add(url, b"gone", status=404, reason="Not Found")

    outcome = downloader.download(url)

    assert outcome.status is DownloadStatus.FAILED
    assert outcome.reason is FailureReason.BAD_STATUS
    assert outcome.detail == "404 Not Found"
    assert not (tmp_path / "PDFs" / "missing.pdf").exists()


def test_wrong_content_type_creates_no_file(tmp_path, session, downloader) -> None:
    url = "https://example.com/login.pdf"
    session.add(url, b"<html>sign in</html>", content_type="text/html; charset=utf-8")

    outcome = downloader.download(url)

    assert outcome.reason is FailureReason.WRONG_CONTENT_TYPE
    assert outcome.detail == "text/html; charset=utf-8"
    assert not (tmp_path / "PDFs" / "login.pdf").exists()


def test_missing_content_type_is_rejected(session, downloader) -> None:
    url = "https://example.com/raw.pdf"
    session.add(url, PDF_BYTES, content_type=None)
    assert downloader.download(url).reason is FailureReason.WRONG_CONTENT_TYPE


def test_content_type_with_parameters_is_accepted(session, downloader) -> None:
    url = "https://example.com/typed.pdf"
    session.add(url, PDF_BYTES, content_type="Application/PDF; qs=0.001")
    assert downloader.download(url).status is DownloadStatus.SUCCEEDED


def test_empty_body_creates_no_file(tmp_path, session, downloader) -> None:
    url = "https://example.com/empty.pdf"
    session.add(url, b"")

    outcome = downloader.download(url)

    assert outcome.reason is FailureReason.EMPTY_BODY
    assert not (tmp_path / "PDFs" / "empty.pdf").exists()


def test_transport_error_creates_no_file(tmp_path, session, downloader) -> None:
    url = "https://example.com/slow.pdf"
    session.fail(url, requests.Timeout("read timed out"))

    outcome = downloader.download(url)

    assert outcome.reason is FailureReason.TRANSPORT
    assert "timed out" in outcome.detail
    assert list((tmp_path / "PDFs").iterdir()) == []


def test_colliding_names_skip_second_url(session, downloader) -> None:
    first = "https://example.com/sheet%20one.pdf?v=2"
    second = "https://example.com/sheet_one.pdf"
    session.add_pdf(first)
    session.add_pdf(second, b"%PDF-other")

    assert downloader.download(first).status is DownloadStatus.SUCCEEDED
    outcome = downloader.download(second)

    assert outcome.status is DownloadStatus.SKIPPED
    assert outcome.path.read_bytes() == PDF_BYTES
    assert session.urls == [first]


def test_unusable_filename_fails_without_network(session, downloader) -> None:
    outcome = downloader.download("https://example.com")
    assert outcome.reason is FailureReason.WRITE_ERROR
    assert outcome.path is None
    assert session.calls == []


def test_write_failure_is_reported(monkeypatch, session, downloader) -> None:
    url = "https://example.com/locked.pdf"
    session.add_pdf(url)

    def refuse(path, data):
        raise StoreError(f"Failed to create {path}: permission denied", path)

    monkeypatch.setattr(downloader.store, "create_exclusive", refuse)
    outcome = downloader.download(url)

    assert outcome.reason is FailureReason.WRITE_ERROR
    assert "permission denied" in outcome.detail


def test_file_appearing_during_download_is_skipped(tmp_path, monkeypatch, session, downloader) -> None:
    url = "https://example.com/race.pdf"
    target = tmp_path / "PDFs" / "race.pdf"
    session.add_pdf(url)
    real_get = session.get

    def get_then_lose_race(url, timeout=None):
        response = real_get(url, timeout=timeout)
        target.write_bytes(b"%PDF-winner")
        return response

    monkeypatch.setattr(session, "get", get_then_lose_race)
    outcome = downloader.download(url)

    assert outcome.status is DownloadStatus.SKIPPED
    assert target.read_bytes() == b"%PDF-winner"


def test_summary_counts_outcomes(session, downloader) -> None:
    session.add_pdf("https://example.com/ok.pdf")
    downloader.download("https://example.com/ok.pdf")
    downloader.download("https://example.com/ok.pdf")
    downloader.download("https://example.com/nope.pdf")

    assert downloader.summary() == "Downloaded: 1, Skipped: 1, Failed: 1"


def test_session_gets_user_agent(session, downloader) -> None:
    assert "User-Agent" in session.headers
    downloader.close()
    assert session.closed


def test_outcome_csv_row(session, downloader) -> None:
    session.add("https://example.com/x.pdf", b"", status=500, reason="Server Error")
    outcome = downloader.download("https://example.com/x.pdf")
    assert outcome.to_csv_row("ab") == [
        "ab",
        "https://example.com/x.pdf",
        "x.pdf",
        "failed",
        "bad_status",
        0,
        "500 Server Error",
    ]
    assert isinstance(outcome.path, Path)
