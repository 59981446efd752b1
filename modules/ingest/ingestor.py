"""Download-then-transcode ingestion of a single image into a slot."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from modules.errors import DecodeError, WriteError
from modules.ingest.fetcher import ImageFetcher
from modules.ingest.transcoder import DEFAULT_JPEG_QUALITY, transcode_to_jpeg

logger = logging.getLogger(__name__)

TEMP_FILENAME = "temp_download"
CANONICAL_FILENAME = "1.jpg"

Reporter = Callable[[str], None]


class ImageIngestor:
    """Turn a remote image URL into the canonical ``1.jpg`` of a slot."""

    def __init__(
        self,
        fetcher: Optional[ImageFetcher] = None,
        quality: int = DEFAULT_JPEG_QUALITY,
        keep_failed_downloads: bool = False,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.fetcher = fetcher or ImageFetcher()
        self.quality = quality
        self.keep_failed_downloads = keep_failed_downloads
        self._report = reporter or (lambda message: None)

    def ingest(self, source_url: str, slot_dir: Path) -> Path:
        """Fetch ``source_url`` into ``slot_dir`` and return the canonical path."""
        slot_dir = Path(slot_dir)
        temp_path = slot_dir / TEMP_FILENAME
        final_path = slot_dir / CANONICAL_FILENAME

        self._report(f"Downloading image from: {source_url}")
        self.fetcher.fetch(source_url, temp_path)

        self._report("Converting to JPG format...")
        try:
            transcode_to_jpeg(temp_path, final_path, quality=self.quality)
        except DecodeError:
            if self.keep_failed_downloads:
                logger.info("Keeping undecodable download at %s", temp_path)
            else:
                self._remove_temp(temp_path, strict=False)
            raise

        self._remove_temp(temp_path, strict=True)
        return final_path

    def _remove_temp(self, temp_path: Path, strict: bool) -> None:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as exc:
            if strict:
                raise WriteError(f"Cannot remove temporary download {temp_path}: {exc}") from exc
            logger.warning("Could not remove temporary download %s: %s", temp_path, exc)
