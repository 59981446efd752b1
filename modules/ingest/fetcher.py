"""HTTP download of remote images with an explicit redirect loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urljoin

import requests

from modules.errors import FetchError, RedirectLoopError, WriteError

logger = logging.getLogger(__name__)

REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})

DEFAULT_BROWSER_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Sec-Fetch-Dest": "image",
    "Sec-Fetch-Mode": "no-cors",
    "Sec-Fetch-Site": "cross-site",
}


@dataclass(slots=True)
class FetchResult:
    """Outcome of a completed download."""

    url: str
    final_url: str
    status_code: int
    bytes_written: int
    redirects: List[str] = field(default_factory=list)


class ImageFetcher:
    """Download a URL to a local file, following redirects up to a limit."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = 30.0,
        max_redirects: int = 10,
        send_browser_headers: bool = True,
        extra_headers: Optional[Dict[str, str]] = None,
        chunk_size: int = 8192,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_redirects = max(0, max_redirects)
        self.send_browser_headers = send_browser_headers
        self.extra_headers = dict(extra_headers or {})
        self.chunk_size = chunk_size

    def build_headers(self, url: str) -> Dict[str, str]:
        """Return request headers for ``url``."""
        headers: Dict[str, str] = {}
        if self.send_browser_headers:
            headers.update(DEFAULT_BROWSER_HEADERS)
            headers["Referer"] = url
        headers.update(self.extra_headers)
        return headers

    def fetch(self, url: str, destination: Path) -> FetchResult:
        """Stream the resource at ``url`` into ``destination``."""
        destination = Path(destination)
        current_url = url
        redirects: list[str] = []

        while True:
            response = self._get(current_url)
            try:
                status = response.status_code
                if status in REDIRECT_STATUS_CODES:
                    location = response.headers.get("Location")
                    if not location:
                        raise FetchError(
                            f"Redirect {status} from {current_url} has no Location header",
                            url=current_url,
                            status_code=status,
                        )
                    if len(redirects) >= self.max_redirects:
                        raise RedirectLoopError(
                            f"Too many redirects (more than {self.max_redirects}) starting at {url}",
                            url=current_url,
                            status_code=status,
                        )
                    next_url = urljoin(current_url, location)
                    logger.debug("Redirect %s: %s -> %s", status, current_url, next_url)
                    redirects.append(next_url)
                    current_url = next_url
                    continue

                if not 200 <= status < 300:
                    raise FetchError(
                        f"Failed to download image: {status}",
                        url=current_url,
                        status_code=status,
                    )

                written = self._write_body(response, destination, current_url)
            finally:
                response.close()

            logger.info("Downloaded %s bytes from %s", written, current_url)
            return FetchResult(
                url=url,
                final_url=current_url,
                status_code=status,
                bytes_written=written,
                redirects=redirects,
            )

    # Internal helpers ---------------------------------------------------------
    def _get(self, url: str) -> requests.Response:
        try:
            return self.session.get(
                url,
                headers=self.build_headers(url),
                stream=True,
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise FetchError(f"Failed to download image from {url}: {exc}", url=url) from exc

    def _write_body(self, response: requests.Response, destination: Path, url: str) -> int:
        written = 0
        try:
            with destination.open("wb") as fp:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if not chunk:
                        continue
                    fp.write(chunk)
                    written += len(chunk)
        except requests.RequestException as exc:
            _discard(destination)
            raise FetchError(
                f"Connection failed while downloading {url}: {exc}",
                url=url,
                status_code=response.status_code,
            ) from exc
        except OSError as exc:
            _discard(destination)
            raise WriteError(f"Cannot write download to {destination}: {exc}") from exc
        return written


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove partial download %s: %s", path, exc)
