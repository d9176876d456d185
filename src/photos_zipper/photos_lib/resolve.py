"""Locates a pre-built archive for a folder before any client-side assembly."""
import logging
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from .fetch import Fetcher
from ..utils.constants import FALLBACK_FOLDER_NAME, PHOTOS_ROOT, ZIP_CANDIDATES, ZIP_OVERRIDES

logger = logging.getLogger(__name__)


class ZipCandidateResolver:
    """Probes candidate archive locations in a fixed order.

    An override table entry matching the folder name (case-insensitively) is
    probed first and wins outright when it exists. Otherwise the templates
    are tried in order; the first existing URL is returned and nothing after
    it is probed.
    """

    def __init__(self, fetcher: Fetcher, overrides: Optional[Dict[str, str]] = None,
                 templates: Optional[List[str]] = None, photos_root: str = PHOTOS_ROOT):
        self.fetcher = fetcher
        table = ZIP_OVERRIDES if overrides is None else overrides
        self.overrides = {k.lower(): v for k, v in table.items()}
        self.templates = list(ZIP_CANDIDATES if templates is None else templates)
        self.photos_root = photos_root if photos_root.endswith('/') else photos_root + '/'

    def override_for(self, folder_name: str) -> Optional[str]:
        return self.overrides.get((folder_name or '').lower())

    def candidates(self, folder_name: str, folder_path: str) -> List[str]:
        name = quote(folder_name or FALLBACK_FOLDER_NAME, safe='')
        return [t.format(folder_path=folder_path, photos_root=self.photos_root, name=name) for t in self.templates]

    def first_available(self, candidates: Iterable[str]) -> Optional[str]:
        for url in candidates:
            if self.fetcher.exists(url):
                return url
            logger.debug(f"No archive at {url}")
        return None

    def resolve(self, folder_name: str, folder_path: str) -> Optional[str]:
        override = self.override_for(folder_name)
        if override and self.fetcher.exists(override):
            logger.info(f"Using override archive for {folder_name}: {override}")
            return override
        if override:
            logger.warning(f"Override archive for {folder_name} is missing: {override}")
        found = self.first_available(self.candidates(folder_name, folder_path))
        if found:
            logger.info(f"Found pre-built archive for {folder_name}: {found}")
        else:
            logger.info(f"No pre-built archive for {folder_name}")
        return found
