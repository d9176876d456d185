"""Single shared progress indicator for whichever transfer pipeline is active."""
import threading
from typing import Callable, List

Listener = Callable[[int], None]


class ProgressReporter:
    """Percentage in [0, 100] that only moves forward within one operation.

    `start()` resets it, `report()` raises it and `finish()` pins it at 100 so
    an operation with failed items never leaves the indicator short.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._value = 0
        self._listeners: List[Listener] = []

    @property
    def value(self) -> int:
        return self._value

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def start(self) -> None:
        self._set(0, force=True)

    def report(self, percent: float) -> None:
        self._set(max(0, min(100, int(round(percent)))))

    def report_ratio(self, completed: int, total: int) -> None:
        self.report(completed / total * 100 if total else 100)

    def finish(self) -> None:
        self._set(100, force=True)

    def _set(self, value: int, force: bool = False) -> None:
        with self._lock:
            if not force and value <= self._value:
                return
            self._value = value
            for listener in list(self._listeners):
                listener(value)
