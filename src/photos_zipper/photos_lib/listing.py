"""Folder discovery: structured JSON indexes first, HTML listings as a fallback."""
import logging
from typing import List
from urllib.parse import quote

from .errors import ParseError, TransportError
from .fetch import Fetcher
from .models import FolderNode, Listing
from .parse import parse_directory_listing, parse_image_sources, parse_index_document, parse_manifest_document
from ..utils.constants import INDEX_NAME, MANIFEST_NAME, PHOTOS_ROOT

logger = logging.getLogger(__name__)


class RemoteListing:
    """Lists one remote folder as a uniform `Listing`. Never raises and never caches."""

    def __init__(self, fetcher: Fetcher, index_name: str = INDEX_NAME):
        self.fetcher = fetcher
        self.index_name = index_name

    def list(self, folder_path: str) -> Listing:
        try:
            files, folders = parse_index_document(self.fetcher.get_json(folder_path + self.index_name))
            return Listing(files=files, folders=folders, source='index')
        except (TransportError, ParseError) as e:
            logger.debug(f"No usable {self.index_name} for {folder_path}: {e}")

        try:
            html_content = self.fetcher.get_text(folder_path)
        except TransportError as e:
            logger.warning(f"Could not list {folder_path}: {e}")
            return Listing(error=str(e))

        try:
            files, folders = parse_directory_listing(html_content, self.fetcher.url_for(folder_path))
            source = 'html'
            if not files:
                # Static gallery pages render <img> thumbnails instead of file links
                files = parse_image_sources(html_content)
                if files:
                    source = 'images'
        except Exception as e:
            logger.warning(f"Could not parse listing for {folder_path}: {e}")
            return Listing(error=f"Unreadable listing: {e}")
        return Listing(files=files, folders=folders, source=source)


class ManifestLoader:
    """Loads the top-level folder list from the photos root."""

    def __init__(self, fetcher: Fetcher, photos_root: str = PHOTOS_ROOT, manifest_name: str = MANIFEST_NAME):
        self.fetcher = fetcher
        self.photos_root = photos_root if photos_root.endswith('/') else photos_root + '/'
        self.manifest_name = manifest_name

    def folder_path(self, name: str) -> str:
        return self.photos_root + quote(name) + '/'

    def load(self) -> List[FolderNode]:
        try:
            names = parse_manifest_document(self.fetcher.get_json(self.photos_root + self.manifest_name))
        except (TransportError, ParseError) as e:
            logger.warning(f"Manifest not found ({e}), falling back to the {self.photos_root} listing")
            names = self._names_from_listing()
        return [FolderNode(name=n, path=self.folder_path(n)) for n in names]

    def _names_from_listing(self) -> List[str]:
        try:
            html_content = self.fetcher.get_text(self.photos_root)
            _, folders = parse_directory_listing(html_content, self.fetcher.url_for(self.photos_root))
        except Exception as e:
            logger.warning(f"Could not read folder list from {self.photos_root}: {e}")
            return []
        return folders
