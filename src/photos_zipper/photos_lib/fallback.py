"""One-file-at-a-time downloads for when no archive can be built."""
import logging
import time
from typing import Callable, Sequence

from .models import ArchiveTask
from .progress import ProgressReporter
from ..utils.constants import SEQUENTIAL_PAUSE
from ..utils.filenames import prefixed_filename

logger = logging.getLogger(__name__)


class SequentialDownloadFallback:
    """Delivers each task's file in order with a fixed pause between downloads.

    Not an archive, but it keeps working without one. A failing file is
    logged and skipped; the run itself never fails.
    """

    def __init__(self, delivery, progress: ProgressReporter, pause: float = SEQUENTIAL_PAUSE,
                 sleep: Callable[[float], None] = time.sleep):
        self.delivery = delivery
        self.progress = progress
        self.pause = pause
        self.sleep = sleep

    def download_all(self, tasks: Sequence[ArchiveTask]) -> int:
        delivered = 0
        for i, task in enumerate(tasks):
            if i:
                self.sleep(self.pause)
            try:
                self.delivery.save_url(task.url, prefixed_filename(task.folder_label, task.file_name))
                delivered += 1
            except Exception as e:
                logger.warning(f"download skip {task.url}: {e}")
            self.progress.report_ratio(i + 1, len(tasks))
        logger.info(f"Sequential download finished: {delivered}/{len(tasks)} file(s)")
        return delivered
