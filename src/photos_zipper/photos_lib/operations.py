"""Top-level user operations: resolve-and-download, build an archive, download everything visible.

Each operation resets the shared progress indicator when it starts and pins
it at 100 when it ends, whatever happened in between.
"""
import logging
from typing import List, Optional
from urllib.parse import unquote

from .archive import ConcurrentArchiveBuilder
from .errors import CapabilityUnavailable, UserFacingFailure
from .fallback import SequentialDownloadFallback
from .models import ArchiveTask, FolderNode
from .progress import ProgressReporter
from .resolve import ZipCandidateResolver
from .tree import FolderTree
from ..utils.constants import ALL_ARCHIVE_NAME
from ..utils.filenames import archive_filename, base_filename

logger = logging.getLogger(__name__)

PREBUILT = 'prebuilt'
BUILT = 'built'
SEQUENTIAL = 'sequential'


def tasks_for(node: FolderNode, label: Optional[str] = None) -> List[ArchiveTask]:
    label = label or node.name
    return [ArchiveTask(source_folder_path=node.path, file_name=f.name, folder_label=label) for f in node.files]


def folder_label(node: FolderNode, photos_root: str) -> str:
    """Path of `node` below the photos root (`2023/day1`), or its name when outside it."""
    if node.path.startswith(photos_root):
        relative = unquote(node.path[len(photos_root):]).strip('/')
        if relative:
            return relative
    return node.name


def _deliver_result(delivery, result) -> str:
    if not result.packed:
        raise UserFacingFailure('Failed to download any files')
    delivery.save_bytes(result.data, result.filename)
    return BUILT


class BuildArchive:
    """Assemble one folder's files (non-recursive) into `<name>.zip`."""

    def __init__(self, tree: FolderTree, builder: ConcurrentArchiveBuilder,
                 fallback: SequentialDownloadFallback, delivery, progress: ProgressReporter):
        self.tree = tree
        self.builder = builder
        self.fallback = fallback
        self.delivery = delivery
        self.progress = progress

    def run(self, node: FolderNode) -> str:
        self.progress.start()
        try:
            self.tree.expand(node)
            if node.error:
                raise UserFacingFailure('Failed to list folder')
            tasks = tasks_for(node)
            if not tasks:
                raise UserFacingFailure('No files found to zip')
            try:
                result = self.builder.build(tasks, filename=archive_filename(node.name))
            except CapabilityUnavailable as e:
                logger.warning(f"{e}; downloading {len(tasks)} file(s) from {node.path} one by one")
                self.fallback.download_all(tasks)
                return SEQUENTIAL
            return _deliver_result(self.delivery, result)
        finally:
            self.progress.finish()


class ResolveAndDownload:
    """Prefer a pre-built archive; assemble one only when none exists."""

    def __init__(self, resolver: ZipCandidateResolver, build: BuildArchive, delivery, progress: ProgressReporter):
        self.resolver = resolver
        self.build = build
        self.delivery = delivery
        self.progress = progress

    def run(self, node: FolderNode) -> str:
        self.progress.start()
        found = self.resolver.resolve(node.name, node.path)
        if found:
            try:
                if found == self.resolver.override_for(node.name):
                    filename = base_filename(found)
                else:
                    filename = archive_filename(node.name)
                self.delivery.save_url(found, filename)
                return PREBUILT
            finally:
                self.progress.finish()
        return self.build.run(node)


class DownloadAllVisible:
    """Pack every visible folder into one archive grouped by folder path."""

    def __init__(self, tree: FolderTree, builder: ConcurrentArchiveBuilder,
                 fallback: SequentialDownloadFallback, delivery, progress: ProgressReporter):
        self.tree = tree
        self.builder = builder
        self.fallback = fallback
        self.delivery = delivery
        self.progress = progress

    def collect_tasks(self) -> List[ArchiveTask]:
        # Listing a collapsed folder here must not expand it in the tree
        tasks = []
        photos_root = self.tree.manifest.photos_root
        for node in self.tree.visible_nodes():
            label = folder_label(node, photos_root)
            if node.loaded:
                tasks.extend(tasks_for(node, label))
                continue
            listing = self.tree.listing.list(node.path)
            if not listing.ok:
                logger.warning(f"Skipping {node.path}: {listing.error}")
                continue
            tasks.extend(ArchiveTask(source_folder_path=node.path, file_name=f.name, folder_label=label)
                         for f in listing.files)
        return tasks

    def run(self) -> str:
        self.progress.start()
        try:
            tasks = self.collect_tasks()
            if not tasks:
                raise UserFacingFailure('No files found')
            try:
                result = self.builder.build(tasks, filename=ALL_ARCHIVE_NAME, group_by_folder=True)
            except CapabilityUnavailable as e:
                logger.warning(f"{e}; downloading {len(tasks)} file(s) one by one")
                self.fallback.download_all(tasks)
                return SEQUENTIAL
            return _deliver_result(self.delivery, result)
        finally:
            self.progress.finish()
