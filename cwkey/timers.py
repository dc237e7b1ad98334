# cwkey/timers.py
"""
Timer per i gap di silenzio.

Uno scheduler espone:
  now() -> float                       # ms, monotono
  call_later(delay_ms, callback) -> handle
  cancel(handle)

OneShotTimer tiene al massimo UNA scadenza pendente: armarlo di nuovo
cancella la precedente (vince l'ultima).

ManualScheduler è l'orologio simulato dei test: il tempo avanza solo con
advance(ms) e le callback scadute partono in ordine di scadenza.
"""
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)


class OneShotTimer:
    def __init__(self, scheduler, callback=None):
        self.scheduler = scheduler
        self.callback = callback
        self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, delay_ms: float, callback=None):
        self.cancel()
        cb = callback or self.callback
        if cb is None:
            raise ValueError("OneShotTimer armed without a callback")

        def _fire():
            # la scadenza è consumata prima di chiamare: la callback può riarmare
            self._handle = None
            cb()

        self._handle = self.scheduler.call_later(max(0.0, float(delay_ms)), _fire)

    def cancel(self):
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None


class ManualScheduler:
    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)
        self._queue = []            # (deadline, seq, handle)
        self._seq = itertools.count()
        self._cancelled = set()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback):
        seq = next(self._seq)
        heapq.heappush(self._queue, (self._now + float(delay_ms), seq, callback))
        return seq

    def cancel(self, handle):
        # solo se ancora in coda: le scadenze già eseguite non lasciano traccia
        if any(seq == handle for _, seq, _ in self._queue):
            self._cancelled.add(handle)

    def pending(self) -> int:
        return sum(1 for _, seq, _ in self._queue if seq not in self._cancelled)

    def advance(self, ms: float):
        """Avanza l'orologio, eseguendo le callback che scadono nel frattempo."""
        target = self._now + float(ms)
        while self._queue and self._queue[0][0] <= target:
            deadline, seq, callback = heapq.heappop(self._queue)
            if seq in self._cancelled:
                self._cancelled.discard(seq)
                continue
            self._now = max(self._now, deadline)
            callback()
        self._now = target
