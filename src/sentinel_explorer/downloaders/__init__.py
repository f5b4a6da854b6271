"""Downloader implementations for retrieving scene archives.

- HTTPDownloader: streaming HTTP/HTTPS downloads with bearer authentication
  and progress reporting
"""

from sentinel_explorer.downloaders.base import Downloader
from sentinel_explorer.downloaders.http import HTTPDownloader

__all__ = [
    "Downloader",
    "HTTPDownloader",
]
