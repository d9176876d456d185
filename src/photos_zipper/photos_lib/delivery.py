"""Destinations for finished downloads."""
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from .fetch import Fetcher
from ..utils.filenames import clean_filename, unique_path

logger = logging.getLogger(__name__)


class DirectoryDelivery:
    """Writes downloads into a local directory, never overwriting existing files."""

    def __init__(self, fetcher: Fetcher, download_dir):
        self.fetcher = fetcher
        self.download_dir = Path(download_dir)

    def _target(self, filename: str) -> Path:
        self.download_dir.mkdir(parents=True, exist_ok=True)
        return unique_path(self.download_dir / clean_filename(filename))

    def save_url(self, url: str, filename: str) -> Path:
        path = self.fetcher.download_to(url, self._target(filename))
        logger.info(f"Saved {url} -> {path}")
        return path

    def save_bytes(self, data: bytes, filename: str) -> Path:
        path = self._target(filename)
        path.write_bytes(data)
        logger.info(f"Saved {len(data)} bytes -> {path}")
        return path


class RecordingDelivery:
    """Keeps what would have been downloaded so a caller (e.g. an HTTP handler) can hand it on."""

    def __init__(self):
        self.urls: List[Tuple[str, str]] = []
        self.blob: Optional[Tuple[bytes, str]] = None

    def save_url(self, url: str, filename: str) -> str:
        self.urls.append((url, filename))
        return url

    def save_bytes(self, data: bytes, filename: str) -> str:
        self.blob = (data, filename)
        return filename
