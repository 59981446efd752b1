"""Subprocess-backed version-control client."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

from modules.errors import PublishError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandResult:
    """Exit status of one version-control step."""

    step: str
    args: List[str]
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class VersionControl(Protocol):
    """Capabilities the publisher needs from a repository."""

    def stage(self, path: str) -> CommandResult:
        ...

    def commit(self, message: str) -> CommandResult:
        ...

    def push(self) -> CommandResult:
        ...


class GitClient:
    """Run git commands in a working tree with inherited console output."""

    def __init__(
        self,
        repo_dir: Path,
        executable: str = "git",
        remote: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.repo_dir = Path(repo_dir)
        self.executable = executable
        self.remote = remote
        self.timeout = timeout

    def stage(self, path: str) -> CommandResult:
        """Stage ``path`` (relative to the repository directory)."""
        return self._run("stage", ["add", "--", path])

    def commit(self, message: str) -> CommandResult:
        """Commit staged changes with ``message``."""
        return self._run("commit", ["commit", "-m", message])

    def push(self) -> CommandResult:
        """Push the current branch to the configured remote."""
        args = ["push"]
        if self.remote:
            args.append(self.remote)
        return self._run("push", args)

    def _run(self, step: str, args: List[str]) -> CommandResult:
        command = [self.executable, *args]
        logger.debug("Running %s in %s", " ".join(command), self.repo_dir)
        try:
            completed = subprocess.run(command, cwd=self.repo_dir, check=False, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise PublishError(f"git {step} failed: {self.executable} not found", step=step) from exc
        except subprocess.TimeoutExpired as exc:
            raise PublishError(f"git {step} timed out after {self.timeout} seconds", step=step) from exc
        except OSError as exc:
            raise PublishError(f"git {step} could not be started: {exc}", step=step) from exc
        return CommandResult(step=step, args=command, returncode=completed.returncode)
