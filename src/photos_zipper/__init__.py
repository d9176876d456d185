"""Photos zipper package.

Expose convenient entry points for the CLI and the web app.
"""

from .download_photos import PhotosDownloader, main

__version__ = "0.1.0"

__all__ = ["PhotosDownloader", "main", "__version__"]
