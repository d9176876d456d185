"""In-memory zip assembly from remote files under a fixed concurrency cap."""
import importlib
import io
import logging
import zipfile
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence

from .errors import CapabilityUnavailable, PhotosError
from .fetch import Fetcher
from .models import ArchiveResult, ArchiveTask
from .progress import ProgressReporter
from ..utils.constants import DEFAULT_CONCURRENCY
from ..utils.filenames import base_filename, unique_entry_name

logger = logging.getLogger(__name__)

# compression name -> (zipfile constant name, codec module it needs)
COMPRESSION_BACKENDS = {
    'deflated': ('ZIP_DEFLATED', 'zlib'),
    'bzip2': ('ZIP_BZIP2', 'bz2'),
    'lzma': ('ZIP_LZMA', 'lzma'),
    'stored': ('ZIP_STORED', None),
}

_backend_cache: Dict[str, int] = {}


def ensure_archive_backend(compression: str = 'deflated') -> int:
    """Return the zipfile compression constant, loading its codec on first use.

    Raises `CapabilityUnavailable` when the codec cannot be imported.
    """
    if compression in _backend_cache:
        return _backend_cache[compression]
    if compression not in COMPRESSION_BACKENDS:
        raise CapabilityUnavailable(f"Unknown compression method: {compression}")
    constant, module = COMPRESSION_BACKENDS[compression]
    if module:
        try:
            importlib.import_module(module)
        except ImportError as e:
            logger.error(f"Failed to load {module} for {compression} archives: {e}")
            raise CapabilityUnavailable(f"Failed to load archive library ({module})") from e
    _backend_cache[compression] = getattr(zipfile, constant)
    return _backend_cache[compression]


class ConcurrentArchiveBuilder:
    """Fetches every task's file and packs the successes into one zip.

    A pool of `concurrency` workers admits the next task (in list order) as
    soon as any running fetch finishes, successfully or not. Failed tasks are
    logged and left out; they never stop the batch.
    """

    def __init__(self, fetcher: Fetcher, progress: ProgressReporter,
                 concurrency: int = DEFAULT_CONCURRENCY, compression: str = 'deflated', enabled: bool = True):
        self.fetcher = fetcher
        self.progress = progress
        self.concurrency = max(1, int(concurrency))
        self.compression = compression
        self.enabled = enabled

    def build(self, tasks: Sequence[ArchiveTask], filename: str, group_by_folder: bool = False) -> ArchiveResult:
        if not self.enabled:
            raise CapabilityUnavailable('Archive building is disabled')
        method = ensure_archive_backend(self.compression)
        blobs = self._fetch_all(tasks)

        result = ArchiveResult(data=b'', filename=filename)
        buffer = io.BytesIO()
        seen = set()
        with zipfile.ZipFile(buffer, 'w', compression=method) as zf:
            for task, blob in zip(tasks, blobs):
                if blob is None:
                    result.failed.append(task)
                    continue
                name = base_filename(task.file_name)
                if group_by_folder:
                    name = f"{task.folder_label}/{name}"
                name = unique_entry_name(name, seen)
                zf.writestr(name, blob)
                result.packed.append(name)
        result.data = buffer.getvalue()
        logger.info(f"Built {filename}: {len(result.packed)} packed, {len(result.failed)} failed")
        return result

    def _fetch_all(self, tasks: Sequence[ArchiveTask]) -> List[Optional[bytes]]:
        blobs: List[Optional[bytes]] = [None] * len(tasks)
        total = len(tasks)
        completed = 0
        if not total:
            return blobs
        with ThreadPoolExecutor(max_workers=self.concurrency) as executor:
            futures = {executor.submit(self.fetcher.get_bytes, task.url): i for i, task in enumerate(tasks)}
            for future in as_completed(futures):
                i = futures[future]
                try:
                    blobs[i] = future.result()
                except PhotosError as e:
                    logger.warning(f"skip {tasks[i].url}: {e}")
                except Exception as e:
                    logger.exception(f"skip {tasks[i].url}: unexpected error {e}")
                finally:
                    completed += 1
                    self.progress.report_ratio(completed, total)
        return blobs
