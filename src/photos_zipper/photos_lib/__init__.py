"""Shared library for the photos archive tools.

This package contains the engine used by both the CLI and the web interface:
- fetch.py: Network fetching helpers
- parse.py: Index, manifest and HTML listing parsers
- listing.py / tree.py: Folder discovery and the lazily expanded folder tree
- resolve.py: Pre-built archive lookup
- archive.py / fallback.py: Archive assembly and the one-by-one download fallback
- progress.py: Shared progress indicator
- operations.py: User-level operations tying the above together
"""

# No exports needed - import directly from submodules
__all__ = []
