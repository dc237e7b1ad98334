# cwkey/qt_timers.py
"""
Scheduler di produzione sopra QTimer (event loop Qt, thread della GUI).
Interfaccia identica a ManualScheduler: now(), call_later(), cancel().
"""
import math
from time import perf_counter

from PyQt5.QtCore import QObject, QTimer, Qt


class QtScheduler(QObject):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._timers = {}
        self._next = 0

    def now(self) -> float:
        return perf_counter() * 1000.0

    def call_later(self, delay_ms: float, callback):
        handle = self._next
        self._next += 1

        t = QTimer(self)
        t.setSingleShot(True)
        t.setTimerType(Qt.PreciseTimer)

        def _fire():
            self._drop(handle)
            callback()

        t.timeout.connect(_fire)
        self._timers[handle] = t
        # arrotonda per eccesso: un controllo di gap non deve mai anticipare la soglia
        t.start(int(math.ceil(max(0.0, delay_ms))))
        return handle

    def cancel(self, handle):
        t = self._drop(handle)
        if t is not None:
            t.stop()

    def _drop(self, handle):
        t = self._timers.pop(handle, None)
        if t is not None:
            t.deleteLater()
        return t
