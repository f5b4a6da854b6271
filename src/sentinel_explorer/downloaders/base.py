from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any


class Downloader(ABC):
    """Fetches one remote archive per `download` call.

    Implementations hold a connection pool between `init` and `close`; using the
    downloader as a context manager does both.
    """

    @abstractmethod
    def init(self, **kwargs: Any) -> None: ...

    @abstractmethod
    def download(
        self,
        uri: str,
        destination: Path,
        item_id: str,
        access_token: str,
        filename: str | None = None,
    ) -> Path:
        """Save the resource at `uri` inside the `destination` directory.

        Args:
            uri (str): resource to fetch
            destination (Path): directory receiving the file, created when missing
            item_id (str): name used in progress events, usually the scene name
            access_token (str): bearer token for the request
            filename (str | None): name to use when the server does not suggest one

        Raises:
            RemoteError: when the server rejects the request or the transfer breaks.

        Returns:
            Path: the written file
        """
        ...

    @abstractmethod
    def close(self) -> None: ...

    def __enter__(self) -> "Downloader":
        self.init()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
