"""Numbered slot allocation inside a storage root."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

from modules.errors import FilesystemError

logger = logging.getLogger(__name__)

SLOT_NAME_PATTERN = re.compile(r"[0-9]+")
ITEMS_DIR_NAME = "items"


@dataclass(slots=True, frozen=True)
class Slot:
    """A reserved, numbered directory."""

    slot_id: int
    path: Path

    @property
    def name(self) -> str:
        return str(self.slot_id)


def existing_slots(storage_root: Path) -> List[int]:
    """Return the sorted ids of numeric-named directories under the root."""
    root = Path(storage_root)
    if not root.exists():
        return []

    try:
        children = list(root.iterdir())
    except OSError as exc:
        raise FilesystemError(f"Cannot list storage root {root}: {exc}") from exc

    slot_ids: list[int] = []
    for child in children:
        if not SLOT_NAME_PATTERN.fullmatch(child.name):
            continue
        if not child.is_dir():
            continue
        slot_ids.append(int(child.name))
    return sorted(slot_ids)


def allocate_next_slot(storage_root: Path) -> int:
    """Return ``max(existing) + 1``, or ``1`` for an empty or missing root."""
    slot_ids = existing_slots(storage_root)
    if not slot_ids:
        return 1
    return slot_ids[-1] + 1


class SlotAllocator:
    """Reserve slots with an atomic create-if-absent directory operation.

    Allocation is not coordinated between processes. Two concurrent runs may
    pick the same number; the loser sees ``FileExistsError`` and re-allocates
    instead of writing into the winner's slot.
    """

    def __init__(self, storage_root: Path, use_items_dir: bool = False, max_attempts: int = 5) -> None:
        self.storage_root = Path(storage_root)
        self.use_items_dir = use_items_dir
        self.max_attempts = max(1, max_attempts)

    @property
    def slots_root(self) -> Path:
        """Directory whose children are the numbered slots."""
        if self.use_items_dir:
            return self.storage_root / ITEMS_DIR_NAME
        return self.storage_root

    def next_slot_id(self) -> int:
        """Peek at the id the next reservation would try first."""
        return allocate_next_slot(self.slots_root)

    def reserve(self) -> Slot:
        """Create the next slot directory and return it."""
        slots_root = self.slots_root
        try:
            slots_root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"Cannot create storage root {slots_root}: {exc}") from exc

        for _ in range(self.max_attempts):
            slot_id = allocate_next_slot(slots_root)
            slot_path = slots_root / str(slot_id)
            try:
                slot_path.mkdir(exist_ok=False)
            except FileExistsError:
                logger.warning("Slot %s was created concurrently, allocating again", slot_id)
                continue
            except OSError as exc:
                raise FilesystemError(f"Cannot create slot directory {slot_path}: {exc}") from exc
            logger.debug("Reserved slot %s at %s", slot_id, slot_path)
            return Slot(slot_id=slot_id, path=slot_path)

        raise FilesystemError(
            f"Could not reserve a slot under {slots_root} after {self.max_attempts} attempts"
        )
