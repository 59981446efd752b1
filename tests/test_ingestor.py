"""ImageIngestor tests."""

from __future__ import annotations

import io
from pathlib import Path
from typing import List

import pytest
from PIL import Image

from modules.errors import DecodeError, FetchError
from modules.ingest.ingestor import CANONICAL_FILENAME, TEMP_FILENAME, ImageIngestor


def png_bytes(size=(8, 8), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class DummyFetcher:
    """Write fixed bytes to the destination, or fail like the real fetcher."""

    def __init__(self, payload: bytes = b"", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: List[tuple[str, Path]] = []

    def fetch(self, url: str, destination: Path):
        self.calls.append((url, destination))
        if self.error is not None:
            raise self.error
        destination.write_bytes(self.payload)
        return None


def test_ingest_produces_single_canonical_jpeg(tmp_path):
    fetcher = DummyFetcher(png_bytes())
    ingestor = ImageIngestor(fetcher=fetcher)

    result = ingestor.ingest("https://example.com/cat.png", tmp_path)

    assert result == tmp_path / CANONICAL_FILENAME
    assert sorted(p.name for p in tmp_path.iterdir()) == [CANONICAL_FILENAME]
    assert fetcher.calls == [("https://example.com/cat.png", tmp_path / TEMP_FILENAME)]
    with Image.open(result) as image:
        assert image.format == "JPEG"


def test_ingest_reports_progress(tmp_path):
    messages: list[str] = []
    ingestor = ImageIngestor(fetcher=DummyFetcher(png_bytes()), reporter=messages.append)

    ingestor.ingest("https://example.com/cat.png", tmp_path)

    assert messages == [
        "Downloading image from: https://example.com/cat.png",
        "Converting to JPG format...",
    ]


def test_decode_failure_removes_temp_download(tmp_path):
    ingestor = ImageIngestor(fetcher=DummyFetcher(b"<html>error page</html>"))

    with pytest.raises(DecodeError):
        ingestor.ingest("https://example.com/not-an-image", tmp_path)

    assert list(tmp_path.iterdir()) == []


def test_decode_failure_can_keep_temp_download(tmp_path):
    ingestor = ImageIngestor(fetcher=DummyFetcher(b""), keep_failed_downloads=True)

    with pytest.raises(DecodeError):
        ingestor.ingest("https://example.com/empty", tmp_path)

    assert [p.name for p in tmp_path.iterdir()] == [TEMP_FILENAME]


def test_fetch_failure_creates_no_jpeg(tmp_path):
    error = FetchError("Failed to download image: 404", status_code=404)
    ingestor = ImageIngestor(fetcher=DummyFetcher(error=error))

    with pytest.raises(FetchError):
        ingestor.ingest("https://example.com/missing.png", tmp_path)

    assert not (tmp_path / CANONICAL_FILENAME).exists()


def test_quality_setting_is_forwarded(monkeypatch, tmp_path):
    from modules.ingest import ingestor as ingestor_module

    captured = {}

    def fake_transcode(source, destination, quality):
        captured["quality"] = quality
        Path(destination).write_bytes(b"jpeg")
        return destination

    monkeypatch.setattr(ingestor_module, "transcode_to_jpeg", fake_transcode)
    ImageIngestor(fetcher=DummyFetcher(b"raw"), quality=75).ingest("https://example.com/a", tmp_path)

    assert captured["quality"] == 75
    assert not (tmp_path / TEMP_FILENAME).exists()
