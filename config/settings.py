"""Configuration helpers for the new-storage tool."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    storage_root: Path = Path(".")
    use_items_dir: bool = False
    jpeg_quality: int = 90
    fetch_timeout: Optional[float] = 30.0
    max_redirects: int = 10
    send_browser_headers: bool = True
    keep_failed_downloads: bool = False
    max_allocation_attempts: int = 5
    git_executable: str = "git"
    git_remote: Optional[str] = None
    git_timeout: Optional[float] = None
    log_dir: Optional[Path] = None
    log_level: str = "INFO"


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_timeout(name: str, default: Optional[float]) -> Optional[float]:
    """Parse a timeout in seconds; ``0`` or ``none`` disables it."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    if raw.strip().lower() == "none":
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from exc
    return value if value > 0 else None


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    storage_root = Path(os.getenv("STORAGE_ROOT") or ".").expanduser().resolve()
    log_dir_env = os.getenv("LOG_DIR")
    log_dir = Path(log_dir_env).expanduser().resolve() if log_dir_env else None

    jpeg_quality = _env_int("JPEG_QUALITY", 90)
    if not 1 <= jpeg_quality <= 100:
        raise ValueError(f"JPEG_QUALITY must be between 1 and 100, got {jpeg_quality}")

    return AppConfig(
        storage_root=storage_root,
        use_items_dir=_env_bool("STORAGE_USE_ITEMS_DIR", False),
        jpeg_quality=jpeg_quality,
        fetch_timeout=_env_timeout("FETCH_TIMEOUT", 30.0),
        max_redirects=_env_int("MAX_REDIRECTS", 10),
        send_browser_headers=_env_bool("SEND_BROWSER_HEADERS", True),
        keep_failed_downloads=_env_bool("KEEP_FAILED_DOWNLOADS", False),
        max_allocation_attempts=_env_int("MAX_ALLOCATION_ATTEMPTS", 5),
        git_executable=os.getenv("GIT_EXECUTABLE") or "git",
        git_remote=os.getenv("GIT_REMOTE") or None,
        git_timeout=_env_timeout("GIT_TIMEOUT", None),
        log_dir=log_dir,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
