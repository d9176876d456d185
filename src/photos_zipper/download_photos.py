#!/usr/bin/env python3
"""
Photos archive downloader (canonical runner)

Browses a tree of photo folders published on a static web host and downloads
them as zip archives.

Usage notes:
- The host is expected to serve folders under a photos root (default `/photos/`),
    optionally with a `manifest.json` listing the top-level folders and an
    `index.json` per folder. Plain HTML directory listings work as a fallback.
- A folder download first looks for a pre-built archive (`<folder>/<name>.zip`
    and a few alternate locations). Only when none exists is an archive
    assembled locally from the folder's files, a few files at a time.
- When no archive can be built at all, the files are downloaded one by one.

Configuration note:
- Settings are read from an optional `photos_config.json` (see `config.py`);
    command-line flags take precedence over the file.
"""

import argparse
import logging
import sys
import threading
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, List, Optional

from .config import PhotosConfig, load_config
from .photos_lib.archive import ConcurrentArchiveBuilder
from .photos_lib.delivery import DirectoryDelivery
from .photos_lib.errors import OperationBusy, UserFacingFailure
from .photos_lib.fallback import SequentialDownloadFallback
from .photos_lib.fetch import Fetcher
from .photos_lib.listing import ManifestLoader, RemoteListing
from .photos_lib.models import FolderNode
from .photos_lib.operations import BuildArchive, DownloadAllVisible, ResolveAndDownload
from .photos_lib.progress import ProgressReporter
from .photos_lib.resolve import ZipCandidateResolver
from .photos_lib.tree import FolderTree

LOGGER_NAME = 'photos_zipper'
LOG_FORMAT = '%(asctime)s %(levelname)s %(message)s'

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(log_dir, level: int = logging.INFO, console: bool = False) -> logging.Logger:
    """Attach a rotating file handler (and optionally a console handler) to the package logger."""
    pkg_logger = logging.getLogger(LOGGER_NAME)
    pkg_logger.setLevel(level)
    # Replace handlers from an earlier run so log files are not held open twice
    for h in list(pkg_logger.handlers):
        h.close()
        pkg_logger.removeHandler(h)
    fmt = logging.Formatter(LOG_FORMAT)
    try:
        log_path = Path(log_dir) / 'photos_zipper.log'
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(str(log_path), maxBytes=5 * 1024 * 1024, backupCount=3, encoding='utf-8')
        handler.setFormatter(fmt)
        pkg_logger.addHandler(handler)
        if console:
            ch = logging.StreamHandler()
            ch.setFormatter(fmt)
            pkg_logger.addHandler(ch)
    except OSError:
        # Logging should never block downloader operation
        logging.basicConfig(level=level, format=LOG_FORMAT)
    return pkg_logger


class PhotosDownloader:
    """Service object for one browsing session over a photo host.

    Owns the folder tree cache and the single progress indicator; every user
    action goes through one of its methods.
    """

    def __init__(self, config: Optional[PhotosConfig] = None, fetcher: Optional[Fetcher] = None,
                 delivery=None, sequential: bool = False, sleep: Optional[Callable[[float], None]] = None):
        """
        Args:
            config: Effective settings (defaults when omitted)
            fetcher: Fetcher to use instead of one built from `config.base_url`
            delivery: Default destination for downloads (a `DirectoryDelivery`
                on `config.download_dir` when omitted)
            sequential: Skip archive building and always download files one by one
            sleep: Pause function used between sequential downloads
        """
        self.config = config or PhotosConfig()
        self.fetcher = fetcher or Fetcher(self.config.base_url, timeout=self.config.timeout,
                                          verify=self.config.verify_ssl)
        self.delivery = delivery or DirectoryDelivery(self.fetcher, self.config.download_dir)
        self.sequential = sequential
        self.sleep = sleep or time.sleep

        self.listing = RemoteListing(self.fetcher, index_name=self.config.index_name)
        self.manifest = ManifestLoader(self.fetcher, photos_root=self.config.photos_root,
                                       manifest_name=self.config.manifest_name)
        self.tree = FolderTree(self.listing, self.manifest)
        self.resolver = ZipCandidateResolver(self.fetcher, overrides=self.config.zip_overrides,
                                             templates=self.config.zip_candidates,
                                             photos_root=self.config.photos_root)
        self._progress: Optional[ProgressReporter] = None
        self._all_busy = threading.Lock()

    @property
    def progress(self) -> ProgressReporter:
        if self._progress is None:
            self._progress = ProgressReporter()
        return self._progress

    def _builder(self) -> ConcurrentArchiveBuilder:
        return ConcurrentArchiveBuilder(self.fetcher, self.progress, concurrency=self.config.concurrency,
                                        compression=self.config.compression, enabled=not self.sequential)

    def _fallback(self, delivery) -> SequentialDownloadFallback:
        return SequentialDownloadFallback(delivery, self.progress, pause=self.config.sequential_pause,
                                          sleep=self.sleep)

    def _build_op(self, delivery) -> BuildArchive:
        return BuildArchive(self.tree, self._builder(), self._fallback(delivery), delivery, self.progress)

    # --- browsing ---

    def roots(self) -> List[FolderNode]:
        return self.tree.roots()

    def folder(self, name_or_path: str) -> FolderNode:
        """Find a folder by absolute path, or by (case-insensitive) root folder name."""
        if name_or_path.startswith('/'):
            return self.tree.find(name_or_path)
        wanted = name_or_path.strip('/').lower()
        for node in self.roots():
            if node.name.lower() == wanted:
                return node
        return self.tree.find(self.manifest.folder_path(name_or_path.strip('/')))

    def expand(self, name_or_path: str) -> FolderNode:
        return self.tree.expand(self.folder(name_or_path))

    # --- downloads ---

    def download_folder(self, name_or_path: str, delivery=None) -> str:
        """Download one folder: a pre-built archive when available, else a freshly built one."""
        delivery = delivery or self.delivery
        node = self.folder(name_or_path)
        op = ResolveAndDownload(self.resolver, self._build_op(delivery), delivery, self.progress)
        outcome = op.run(node)
        logger.info(f"Folder {node.path} downloaded ({outcome})")
        return outcome

    def build_folder_archive(self, name_or_path: str, delivery=None) -> str:
        """Assemble a folder archive without looking for a pre-built one."""
        delivery = delivery or self.delivery
        return self._build_op(delivery).run(self.folder(name_or_path))

    def download_all(self, delivery=None) -> str:
        """Pack every visible folder into `photos-all.zip`. Only one may run at a time."""
        if not self._all_busy.acquire(blocking=False):
            raise OperationBusy('A download-all is already running')
        try:
            delivery = delivery or self.delivery
            op = DownloadAllVisible(self.tree, self._builder(), self._fallback(delivery), delivery, self.progress)
            outcome = op.run()
            logger.info(f"Download all finished ({outcome})")
            return outcome
        finally:
            self._all_busy.release()


def _progress_bar(value: int, width: int = 30) -> None:
    fill = int(width * value / 100)
    sys.stdout.write('\r  [' + '#' * fill + '-' * (width - fill) + f'] {value:3d}%')
    if value >= 100:
        sys.stdout.write('\n')
    sys.stdout.flush()


def _print_node(node: FolderNode, indent: int = 0) -> None:
    pad = '  ' * indent
    print(f"{pad}📁 {node.name}/")
    if node.error:
        print(f"{pad}   ⚠️  Failed to load contents")
    for child in node.children:
        _print_node(child, indent + 1)
    for entry in node.files:
        print(f"{pad}   {entry.name}")


def main(argv=None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Browse a photo host and download folders as zip archives")
    parser.add_argument('--base-url', '-u', help='Site origin serving the photos root (e.g. https://example.com)')
    parser.add_argument('--config', '-c', help='Path to photos_config.json (default: ./photos_config.json)')
    parser.add_argument('--output', '-o', help='Directory to save downloads into')
    parser.add_argument('--list', action='store_true', help='List the top-level photo folders')
    parser.add_argument('--tree', metavar='FOLDER', help='Show the contents of a folder (name or /path/)')
    parser.add_argument('--folder', '-f', help='Download one folder (name or /path/) as a zip archive')
    parser.add_argument('--all', action='store_true', help='Download all top-level folders into one archive')
    parser.add_argument('--workers', '-w', type=int, help='Parallel fetches while building an archive')
    parser.add_argument('--sequential', action='store_true', help='Do not build archives; download files one by one')
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.base_url:
        config.base_url = args.base_url
    if args.output:
        config.download_dir = args.output
    if args.workers:
        config.concurrency = max(1, args.workers)

    setup_logging(config.download_dir, level=getattr(logging, args.log_level))

    if not (args.list or args.tree or args.folder or args.all):
        parser.print_help()
        return 0

    downloader = PhotosDownloader(config, sequential=args.sequential)
    downloader.progress.subscribe(_progress_bar)

    try:
        if args.list:
            roots = downloader.roots()
            if not roots:
                print("No folders found")
            for node in roots:
                print(f"📁 {node.name}  ({node.path})")
        if args.tree:
            _print_node(downloader.expand(args.tree))
        if args.folder:
            print(f"\n📦 Downloading folder '{args.folder}' into {config.download_dir}")
            outcome = downloader.download_folder(args.folder)
            print(f"✅ Done ({outcome})")
        if args.all:
            print(f"\n📦 Downloading all folders into {config.download_dir}")
            outcome = downloader.download_all()
            print(f"✅ Done ({outcome})")
    except UserFacingFailure as e:
        print(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\n⏸️  Download interrupted by user.")
        return 1
    except Exception as e:
        logger.exception('Unexpected error')
        print(f"\n❌ Download failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
