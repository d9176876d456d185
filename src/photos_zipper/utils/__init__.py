# Utilities package for photos-zipper
from .filenames import archive_filename, base_filename, clean_filename, prefixed_filename, unique_entry_name, unique_path
from .constants import USER_AGENTS, ZIP_CANDIDATES, ZIP_OVERRIDES

__all__ = [
    "archive_filename", "base_filename", "clean_filename", "prefixed_filename", "unique_entry_name",
    "unique_path", "USER_AGENTS", "ZIP_CANDIDATES", "ZIP_OVERRIDES",
]
