import logging
import re
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests
from requests.adapters import HTTPAdapter

from sentinel_explorer.downloaders.base import Downloader
from sentinel_explorer.errors import RemoteError
from sentinel_explorer.model import ProgressEventType
from sentinel_explorer.progress.events import emit_event

log = logging.getLogger(__name__)

# HTTP downloader configuration defaults
DEFAULT_CHUNK_SIZE = 8192  # 8KB
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_POOL_CONNECTIONS = 10
DEFAULT_POOL_MAX_SIZE = 2

_FILENAME_PATTERN = re.compile(r"""filename\*?=(?:UTF-8'')?["']?([^"';]+)["']?""", re.IGNORECASE)


def filename_from_response(response: requests.Response, fallback: str | None = None) -> str:
    """Pick the file name from Content-Disposition, then the fallback, then the URL."""
    disposition = response.headers.get("Content-Disposition", "")
    match = _FILENAME_PATTERN.search(disposition)
    if match:
        return Path(unquote(match.group(1).strip())).name
    if fallback:
        return fallback
    return Path(unquote(urlparse(response.url).path)).name or "download"


class HTTPDownloader(Downloader):
    """Streaming HTTP downloader with bearer authentication and progress reporting.

    Failed requests are reported as `RemoteError` and never retried.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        pool_connections: int = DEFAULT_POOL_CONNECTIONS,
        pool_maxsize: int = DEFAULT_POOL_MAX_SIZE,
    ):
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.pool_conns = pool_connections
        self.pool_size = pool_maxsize
        self.session: requests.Session | None = None

    def init(self, session: requests.Session | None = None, **kwargs) -> None:
        if not session:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=self.pool_conns, pool_maxsize=self.pool_size)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session

    def download(
        self,
        uri: str,
        destination: Path,
        item_id: str,
        access_token: str,
        filename: str | None = None,
    ) -> Path:
        """
        Stream a file from an HTTP URL into `destination`, reporting progress.
        """
        if self.session is None:
            self.init()
        task_id = f"download_{item_id}"
        headers = {"Authorization": f"Bearer {access_token}"}
        destination.mkdir(parents=True, exist_ok=True)

        log.debug("Downloading resource %s into: %s", uri, destination)
        emit_event(ProgressEventType.TASK_CREATED, task_id=task_id, description="download")
        target: Path | None = None
        try:
            with self.session.get(uri, headers=headers, stream=True, timeout=self.timeout) as response:
                if response.status_code != 200:
                    raise RemoteError(
                        f"Download of {item_id} failed",
                        status_code=response.status_code,
                        body=response.text,
                    )

                if "Content-Length" in response.headers:
                    total_size = int(response.headers["Content-Length"])
                    emit_event(ProgressEventType.TASK_DURATION, task_id=task_id, duration=total_size)

                target = destination / filename_from_response(response, fallback=filename)
                downloaded_bytes = 0
                with open(target, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)
                            downloaded_bytes += len(chunk)
                            emit_event(ProgressEventType.TASK_PROGRESS, task_id=task_id, advance=len(chunk))

        except requests.exceptions.RequestException as e:
            log.debug("Request error downloading %s: %s", uri, e)
            self._discard(target)
            emit_event(ProgressEventType.TASK_COMPLETED, task_id=task_id, success=False, description="failed")
            raise RemoteError(f"Download of {item_id} failed: {e}") from e
        except (RemoteError, OSError) as e:
            self._discard(target)
            emit_event(ProgressEventType.TASK_COMPLETED, task_id=task_id, success=False, description=f"failed: {e}")
            raise

        log.debug("Successfully downloaded %s (%s bytes)", uri, downloaded_bytes)
        emit_event(ProgressEventType.TASK_COMPLETED, task_id=task_id, success=True)
        return target

    @staticmethod
    def _discard(target: Path | None) -> None:
        if target is not None and target.exists():
            log.debug("Removing partial download: %s", target)
            target.unlink()

    def close(self) -> None:
        if self.session:
            self.session.close()
            self.session = None
