"""Stage, commit and push a finished slot."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from modules.errors import PublishError
from modules.publishing.git_client import CommandResult, VersionControl
from modules.storage.slot_allocator import Slot

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]


class Publisher:
    """Fail-fast publisher; a failed step is never rolled back."""

    def __init__(self, vcs: VersionControl, repo_root: Path, reporter: Optional[Reporter] = None) -> None:
        self.vcs = vcs
        self.repo_root = Path(repo_root)
        self._report = reporter or (lambda message: None)

    def stage_path(self, slot: Slot) -> str:
        """Slot path as passed to the stage step."""
        try:
            relative = slot.path.relative_to(self.repo_root)
        except ValueError:
            return str(slot.path)
        return relative.as_posix()

    def publish(self, slot: Slot) -> None:
        """Stage the slot, commit it with its id as message, then push."""
        self._report("Adding to git...")
        self._check(self.vcs.stage(self.stage_path(slot)))

        self._report("Committing...")
        self._check(self.vcs.commit(slot.name))

        self._report("Pushing to remote...")
        self._check(self.vcs.push())

        logger.info("Published slot %s", slot.slot_id)

    @staticmethod
    def _check(result: CommandResult) -> None:
        if result.ok:
            return
        raise PublishError(
            f"git {result.step} failed with exit code {result.returncode}",
            step=result.step,
            returncode=result.returncode,
        )
