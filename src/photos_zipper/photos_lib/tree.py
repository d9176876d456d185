"""Lazily expanded folder tree, cached for the lifetime of its owner."""
import logging
import threading
from typing import Dict, Iterator, List, Optional
from urllib.parse import quote, unquote

from .listing import ManifestLoader, RemoteListing
from .models import FolderNode

logger = logging.getLogger(__name__)


class FolderTree:
    def __init__(self, listing: RemoteListing, manifest: ManifestLoader):
        self.listing = listing
        self.manifest = manifest
        self._roots: Optional[List[FolderNode]] = None
        self._roots_lock = threading.Lock()
        # One lock per folder path; a slow listing only holds up its own folder
        self._node_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def roots(self) -> List[FolderNode]:
        with self._roots_lock:
            if self._roots is None:
                self._roots = self.manifest.load()
                logger.info(f"Loaded {len(self._roots)} root folder(s)")
            return self._roots

    def _lock_for(self, path: str) -> threading.Lock:
        with self._locks_guard:
            return self._node_locks.setdefault(path, threading.Lock())

    def expand(self, node: FolderNode) -> FolderNode:
        """Populate `node` from its remote listing once.

        A failed listing leaves the node unloaded and empty with `error` set;
        it is not raised, so callers can show it inline.
        """
        with self._lock_for(node.path):
            if node.loaded:
                return node
            listing = self.listing.list(node.path)
            if not listing.ok:
                node.children, node.files = [], []
                node.error = listing.error
                return node
            node.children = [FolderNode(name=n, path=node.path + quote(n) + '/') for n in listing.folders]
            node.files = list(listing.files)
            node.error = None
            node.loaded = True
            logger.info(f"Expanded {node.path}: {len(node.files)} file(s), {len(node.children)} folder(s) via {listing.source}")
            return node

    def find(self, path: str) -> FolderNode:
        """Locate the node for `path`, expanding ancestors on the way.

        Paths outside the known tree get a detached node so they can still be
        listed and archived.
        """
        path = quote(unquote(path))
        if not path.endswith('/'):
            path += '/'
        nodes = self.roots()
        while True:
            match = next((n for n in nodes if path.startswith(n.path)), None)
            if match is None:
                break
            if match.path == path:
                return match
            nodes = self.expand(match).children
        name = unquote(path.rstrip('/').rsplit('/', 1)[-1])
        return FolderNode(name=name, path=path)

    def visible_nodes(self) -> List[FolderNode]:
        """Root folders plus every child of an expanded folder, in display order."""
        return list(self._walk(self.roots()))

    def _walk(self, nodes: List[FolderNode]) -> Iterator[FolderNode]:
        for node in nodes:
            yield node
            if node.loaded:
                yield from self._walk(node.children)
