from photos_zipper.photos_lib.progress import ProgressReporter


def test_progress_is_monotonic_within_an_operation():
    seen = []
    progress = ProgressReporter()
    progress.subscribe(seen.append)
    progress.start()
    progress.report(40)
    progress.report(25)
    progress.report_ratio(3, 4)
    progress.finish()
    assert seen == [0, 40, 75, 100]
    assert progress.value == 100


def test_start_resets_for_the_next_operation():
    progress = ProgressReporter()
    progress.report(90)
    progress.start()
    assert progress.value == 0
    progress.report(150)
    assert progress.value == 100


def test_report_ratio_with_no_total_is_complete():
    progress = ProgressReporter()
    progress.report_ratio(0, 0)
    assert progress.value == 100
