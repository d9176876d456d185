from photos_zipper.photos_lib.fallback import SequentialDownloadFallback
from photos_zipper.photos_lib.models import ArchiveTask
from photos_zipper.photos_lib.progress import ProgressReporter


class ListDelivery:
    def __init__(self, fail=()):
        self.saved = []
        self.fail = set(fail)

    def save_url(self, url, filename):
        if url in self.fail:
            raise OSError('disk full')
        self.saved.append((url, filename))


def _tasks(names):
    return [ArchiveTask(source_folder_path='/photos/My Trip/', file_name=n, folder_label='My Trip') for n in names]


def test_downloads_one_at_a_time_with_pauses():
    events = []
    delivery = ListDelivery()
    delivery.save_url = lambda url, filename: events.append(('save', filename))
    fallback = SequentialDownloadFallback(delivery, ProgressReporter(), pause=0.2,
                                          sleep=lambda s: events.append(('sleep', s)))
    assert fallback.download_all(_tasks(['a.jpg', 'b.jpg', 'c.jpg'])) == 3
    assert events == [
        ('save', 'My_Trip_a.jpg'),
        ('sleep', 0.2),
        ('save', 'My_Trip_b.jpg'),
        ('sleep', 0.2),
        ('save', 'My_Trip_c.jpg'),
    ]


def test_failing_file_is_skipped():
    delivery = ListDelivery(fail={'/photos/My Trip/b.jpg'})
    progress = ProgressReporter()
    fallback = SequentialDownloadFallback(delivery, progress, sleep=lambda s: None)
    assert fallback.download_all(_tasks(['a.jpg', 'b.jpg', 'c.jpg'])) == 2
    assert [name for _, name in delivery.saved] == ['My_Trip_a.jpg', 'My_Trip_c.jpg']
    assert progress.value == 100
