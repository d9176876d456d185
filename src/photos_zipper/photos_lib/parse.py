"""Parsing helpers for folder indexes, manifests and HTML directory listings."""
from typing import List, Tuple
from urllib.parse import unquote, urljoin, urlparse

from bs4 import BeautifulSoup

from .errors import ParseError
from .models import FileEntry
from ..utils.filenames import base_filename


def _entry_name(item) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict) and isinstance(item.get('name'), str):
        return item['name']
    return ''


def parse_index_document(data) -> Tuple[List[FileEntry], List[str]]:
    """Parse a folder `index.json` payload.

    `files` entries may be plain names or `{name, thumb}` objects; `folders`
    entries may be plain names or `{name}` objects.
    """
    if not isinstance(data, dict):
        raise ParseError('Folder index is not a JSON object')
    files = []
    for item in data.get('files') or []:
        name = _entry_name(item)
        if not name or name.endswith('/'):
            continue
        thumb = item.get('thumb') if isinstance(item, dict) else None
        files.append(FileEntry(name=name, thumb_url=thumb if isinstance(thumb, str) and thumb else None))
    folders = [n.strip('/') for n in (_entry_name(f) for f in data.get('folders') or []) if n.strip('/')]
    return files, folders


def parse_manifest_document(data) -> List[str]:
    """Parse the root `manifest.json` into a list of folder names."""
    if not isinstance(data, dict):
        raise ParseError('Manifest is not a JSON object')
    folders = data.get('folders')
    if not isinstance(folders, list):
        raise ParseError('Manifest has no folder list')
    return [n.strip('/') for n in (_entry_name(f) for f in folders) if n.strip('/')]


def parse_directory_listing(html_content: str, folder_url: str) -> Tuple[List[FileEntry], List[str]]:
    """Split the anchors of a directory listing page into files and subfolders.

    Only links resolving to a direct child of `folder_url` count, which drops
    sort links (`?C=N;O=D`), `../` and absolute "Parent Directory" links.
    """
    soup = BeautifulSoup(html_content, 'html.parser')
    folder = urlparse(folder_url)
    base = folder.path
    files: List[FileEntry] = []
    folders: List[str] = []
    seen = set()
    for a in soup.find_all('a'):
        href = (a.get('href') or '').strip()
        if not href or href.startswith('?') or href.startswith('#') or href == '../':
            continue
        target = urlparse(urljoin(folder_url, href))
        if target.query or target.netloc != folder.netloc or not target.path.startswith(base):
            continue
        rel = target.path[len(base):]
        is_folder = rel.endswith('/')
        rel = rel.rstrip('/')
        if not rel or '/' in rel:
            continue
        name = unquote(rel)
        if name in seen:
            continue
        seen.add(name)
        if is_folder:
            folders.append(name)
        else:
            files.append(FileEntry(name=name))
    return files, folders


def parse_image_sources(html_content: str) -> List[FileEntry]:
    """Base filenames of every `<img src>` on a page that renders thumbnails instead of links."""
    soup = BeautifulSoup(html_content, 'html.parser')
    files = []
    seen = set()
    for img in soup.find_all('img'):
        src = (img.get('src') or '').strip()
        if not src or src.startswith('data:'):
            continue
        name = base_filename(src)
        if name and name not in seen:
            seen.add(name)
            files.append(FileEntry(name=name))
    return files
