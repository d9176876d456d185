"""Shared constants for the photos archive tools."""

USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15',
    'Mozilla/5.0 (X11; Linux x86_64; rv:122.0) Gecko/20100101 Firefox/122.0',
]

PHOTOS_ROOT = '/photos/'
MANIFEST_NAME = 'manifest.json'
INDEX_NAME = 'index.json'

# Folder name (case-insensitive) -> absolute path of an archive that always wins
ZIP_OVERRIDES = {
    'minnesota': '/photos/minnesota/minnesota.zip',
}

# Probed in order; {name} is the URL-encoded folder name
ZIP_CANDIDATES = [
    '{folder_path}{name}.zip',
    '{folder_path}{name}.ZIP',
    '{photos_root}{name}.zip',
    '{photos_root}altfiles/{name}.zip',
]

DEFAULT_CONCURRENCY = 4
SEQUENTIAL_PAUSE = 0.25
ALL_ARCHIVE_NAME = 'photos-all.zip'
FALLBACK_FOLDER_NAME = 'photos'

COMPRESSION_METHODS = ('deflated', 'bzip2', 'lzma', 'stored')
