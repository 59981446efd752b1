"""Allocate a slot, ingest an image into it and publish the result."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from config.settings import AppConfig
from modules.ingest.fetcher import ImageFetcher
from modules.ingest.ingestor import ImageIngestor
from modules.publishing.git_client import GitClient
from modules.publishing.publisher import Publisher
from modules.storage.slot_allocator import Slot, SlotAllocator

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]


@dataclass(slots=True)
class StorageResult:
    """Where an ingested image ended up."""

    slot: Slot
    image_path: Path
    published: bool


class StorageService:
    """Run allocation, ingestion and publishing strictly in sequence.

    Nothing is compensated: if ingestion or publishing fails, the slot stays
    on disk and the next run allocates a fresh number.
    """

    def __init__(
        self,
        config: AppConfig,
        allocator: Optional[SlotAllocator] = None,
        ingestor: Optional[ImageIngestor] = None,
        publisher: Optional[Publisher] = None,
        reporter: Optional[Reporter] = None,
    ) -> None:
        self.config = config
        self._report = reporter or (lambda message: None)
        self.allocator = allocator or SlotAllocator(
            config.storage_root,
            use_items_dir=config.use_items_dir,
            max_attempts=config.max_allocation_attempts,
        )
        self.ingestor = ingestor or ImageIngestor(
            fetcher=ImageFetcher(
                timeout=config.fetch_timeout,
                max_redirects=config.max_redirects,
                send_browser_headers=config.send_browser_headers,
            ),
            quality=config.jpeg_quality,
            keep_failed_downloads=config.keep_failed_downloads,
            reporter=self._report,
        )
        self.publisher = publisher or Publisher(
            GitClient(
                config.storage_root,
                executable=config.git_executable,
                remote=config.git_remote,
                timeout=config.git_timeout,
            ),
            repo_root=config.storage_root,
            reporter=self._report,
        )

    def display_path(self, path: Path) -> str:
        """Path relative to the storage root, for progress output."""
        try:
            return Path(path).relative_to(self.config.storage_root).as_posix()
        except ValueError:
            return str(path)

    def store(self, url: str, publish: bool = True) -> StorageResult:
        """Ingest ``url`` into a new slot and optionally publish it."""
        slot = self.allocator.reserve()
        self._report(f"Created folder: {self.display_path(slot.path)}")

        image_path = self.ingestor.ingest(url, slot.path)
        self._report(f"Image saved to: {self.display_path(image_path)}")
        logger.info("Stored %s in slot %s", url, slot.slot_id)

        if publish:
            self.publisher.publish(slot)
        self._report("Done!")
        return StorageResult(slot=slot, image_path=image_path, published=publish)
