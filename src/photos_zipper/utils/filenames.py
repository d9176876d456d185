import re
from pathlib import Path
from typing import Set
from urllib.parse import unquote, urlparse

from .constants import FALLBACK_FOLDER_NAME

INVALID_FS_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]+')


def base_filename(ref: str) -> str:
    """Collapse a URL, href or path to its decoded last segment."""
    path = urlparse(ref).path if '://' in ref else ref.split('?', 1)[0].split('#', 1)[0]
    return unquote(path.rstrip('/').rsplit('/', 1)[-1])


def archive_filename(folder_name: str) -> str:
    return (folder_name or FALLBACK_FOLDER_NAME) + '.zip'


def prefixed_filename(folder_label: str, file_name: str) -> str:
    """Suggested name for a loose download, keeping the folder as context.

    `My Trip` + `img/a.jpg` -> `My_Trip_a.jpg`
    """
    prefix = re.sub(r'[\s/]+', '_', folder_label) + '_' if folder_label else ''
    return prefix + base_filename(file_name)


def clean_filename(name: str, fallback: str = 'file') -> str:
    """Make a name safe to write to the local filesystem."""
    name = re.sub(r'\s+', ' ', (name or '').strip())
    name = INVALID_FS_CHARS.sub('_', name).strip(' .')
    return name or fallback


def unique_entry_name(name: str, seen: Set[str]) -> str:
    """Return `name`, or `stem (n).ext` when it was already used, and record it."""
    if name not in seen:
        seen.add(name)
        return name
    stem, dot, ext = name.rpartition('.')
    if not dot or not stem:
        stem, ext = name, ''
    n = 1
    while True:
        candidate = f"{stem} ({n})" + (f".{ext}" if ext else '')
        if candidate not in seen:
            seen.add(candidate)
            return candidate
        n += 1


def unique_path(path: Path) -> Path:
    if not path.exists():
        return path
    n = 1
    while True:
        candidate = path.parent / f"{path.stem} ({n}){path.suffix}"
        if not candidate.exists():
            return candidate
        n += 1
