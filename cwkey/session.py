# cwkey/session.py
"""
KeyingSession: un decoder attivo per il metodo di input selezionato.
Cambiare metodo azzera il vecchio decoder (timer cancellati, buffer a zero)
prima di crearne uno nuovo: nulla del carattere parziale passa al successivo.
"""
import logging

from cwkey.engines import DECODERS, DEFAULT_WPM, make_decoder

logger = logging.getLogger(__name__)


class KeyingSession:
    def __init__(self, scheduler=None, method="straight", clock=None,
                 on_element_start=None, on_element_end=None, on_emit=None,
                 table=None, wpm=DEFAULT_WPM):
        self.scheduler = scheduler
        self._options = dict(clock=clock, on_element_start=on_element_start,
                             on_element_end=on_element_end, on_emit=on_emit,
                             table=table)
        self.wpm = wpm
        self.method = None
        self.decoder = None
        self.select(method)

    @staticmethod
    def methods():
        return sorted(DECODERS)

    def select(self, method: str):
        new = make_decoder(method, self.scheduler, wpm=self.wpm, **self._options)
        if self.decoder is not None:
            self.decoder.reset()
            logger.debug("input method %s -> %s", self.method, method)
        self.method = method
        self.decoder = new
        return new

    # ---------- inoltro ----------
    def input(self, symbol, pressed: bool):
        self.decoder.input(symbol, pressed)

    def confirm(self):
        return self.decoder.confirm()

    def force_emit(self):
        return self.decoder.force_emit()

    def reset(self):
        self.decoder.reset()

    def set_wpm(self, wpm: float):
        self.decoder.set_wpm(wpm)
        self.wpm = wpm

    def peek_partial_code(self) -> str:
        return self.decoder.peek_partial_code()

    def show(self) -> str:
        return self.decoder.show()
