# cwkey/engines.py
"""
Decoder a eventi: tasto → punti/linee → caratteri.

  dec = make_decoder("straight", scheduler, on_emit=cb_char)
  dec.input(None, True)     # key down
  dec.input(None, False)    # key up
  ...
  dec.force_emit()          # chiude subito il carattere in buffer

Tre varianti, stessa interfaccia (input / confirm / force_emit / reset /
set_wpm / peek_partial_code / show). Non ereditano tra loro: condividono
un KeyingContext (albero, buffer, timer di gap, callback, durata del dit).

Tempi in ms. dit = 1200 / WPM.
  linea se ON >= 2 dit, fine lettera dopo 3 dit di silenzio, spazio dopo 7.
"""
import logging
from time import perf_counter

from cwkey.errors import InvalidStateError, InvalidSymbolError
from cwkey.morse_table import DOT, DASH, DASH_LENGTH, LETTER_GAP, WORD_GAP, MorseTable
from cwkey.timers import OneShotTimer
from cwkey.traversal import TraversalIndex

logger = logging.getLogger(__name__)

DEFAULT_WPM = 20
DASH_THRESHOLD = 2      # dit
WORD_SPACE = " "

_EPS_MS = 1e-6          # tolleranza sugli arrotondamenti float delle scadenze

# Stati
IDLE = "idle"
ON = "on"
CODE = "code"
WORD = "word"
HOLD_DOT = "hold_dot"
HOLD_DASH = "hold_dash"
HOLD_BOTH = "hold_both"
HOLD_STATES = (HOLD_DOT, HOLD_DASH, HOLD_BOTH)


def _monotonic_ms() -> float:
    return perf_counter() * 1000.0


class KeyingContext:
    """Substrato comune: buffer del carattere, timer di gap, callback, velocità."""
    def __init__(self, scheduler=None, clock=None, on_element_start=None,
                 on_element_end=None, on_emit=None, table=None, wpm=DEFAULT_WPM):
        self.scheduler = scheduler
        if clock is not None:
            self.now = clock
        elif scheduler is not None:
            self.now = scheduler.now
        else:
            self.now = _monotonic_ms

        self.table = table if isinstance(table, MorseTable) else MorseTable(table)
        self.buffer = TraversalIndex(self.table)
        self.gap = OneShotTimer(scheduler)

        self.on_element_start = on_element_start
        self.on_element_end = on_element_end
        self.on_emit = on_emit

        self.wpm = float(DEFAULT_WPM)
        self.dit_ms = 1200.0 / self.wpm
        self.set_wpm(wpm)

    def set_wpm(self, wpm: float):
        # un timer già armato NON viene riscalato
        if wpm is None or wpm <= 0:
            raise ValueError(f"words per minute must be positive, got {wpm!r}")
        self.wpm = float(wpm)
        self.dit_ms = 1200.0 / self.wpm

    def reached(self, elapsed_ms: float, units: float) -> bool:
        return elapsed_ms + _EPS_MS >= units * self.dit_ms

    # ---------- feedback ----------
    def element_start(self):
        if self.on_element_start:
            self.on_element_start()

    def element_end(self):
        if self.on_element_end:
            self.on_element_end()

    def emit(self, txt: str):
        if self.on_emit:
            self.on_emit(txt)

    # ---------- buffer ----------
    def flush(self):
        ch = self.buffer.reset_and_decode()
        if ch:
            self.emit(ch)
        return ch

    def reset(self):
        self.gap.cancel()
        self.buffer.reset()


class WinderDecoder:
    """Due tasti espliciti punto/linea, nessun tempo. Conferma = lettera + spazio."""
    name = "winder"

    def __init__(self, context: KeyingContext):
        self.ctx = context

    def input(self, symbol, pressed: bool):
        if symbol not in (DOT, DASH):
            raise InvalidSymbolError(symbol, self.name)
        if pressed:
            self.ctx.element_start()
            self.ctx.buffer.commit(symbol)
        else:
            self.ctx.element_end()

    def confirm(self):
        ch = self.force_emit()
        self.ctx.emit(WORD_SPACE)
        return ch

    def force_emit(self):
        ch = self.ctx.flush()
        self.reset()
        return ch

    def reset(self):
        self.ctx.reset()

    def set_wpm(self, wpm: float):
        self.ctx.set_wpm(wpm)

    def peek_partial_code(self) -> str:
        return self.ctx.buffer.peek_partial_code()

    def show(self) -> str:
        return self.ctx.buffer.show()


class StraightKeyDecoder:
    """
    Tasto verticale: la durata di ON decide punto/linea, il silenzio chiude
    lettere e parole. Il timer di gap serve quando l'operatore smette di
    battere: senza nuovi eventi nessuno controllerebbe il silenzio.

            press / release
      idle  → on / -
      on    - / punto|linea, → code, timer 3 dit
      code  → on / a 3 dit lettera, → word, timer fino a 7 dit
      word  → on / a 7 dit spazio, → idle
    """
    name = "straight"

    def __init__(self, context: KeyingContext):
        if context.scheduler is None:
            raise ValueError(f"{self.name} decoder needs a scheduler")
        self.ctx = context
        self.ctx.gap.callback = self._on_gap
        self.state = IDLE
        self._last = 0.0

    def _on_gap(self):
        self.input(None, False)

    def _goto(self, state):
        logger.debug("%s: %s -> %s", self.name, self.state, state)
        self.state = state

    def _key_down(self, now):
        self._goto(ON)
        self._last = now
        self.ctx.element_start()

    def input(self, key=None, pressed: bool = False):
        # key: qualunque identità del tasto, None dal timer
        now = self.ctx.now()
        duration = now - self._last

        if pressed:
            self.ctx.gap.cancel()

        if self.state == IDLE:
            if pressed:
                self._key_down(now)

        elif self.state == ON:
            if not pressed:
                if duration < DASH_THRESHOLD * self.ctx.dit_ms:
                    self.ctx.buffer.commit_dot()
                else:
                    self.ctx.buffer.commit_dash()
                self._goto(CODE)
                self._last = now
                self.ctx.element_end()
                self.ctx.gap.arm(LETTER_GAP * self.ctx.dit_ms)

        elif self.state in (CODE, WORD):
            self._check_gaps(duration, pressed)
            if pressed:
                self._key_down(now)

        else:
            raise InvalidStateError(self.state, self.name)

    def _check_gaps(self, duration, pressed):
        ctx = self.ctx
        if self.state == CODE:
            if ctx.reached(duration, LETTER_GAP):
                ctx.flush()
                self._goto(WORD)
            elif not pressed:
                ctx.gap.arm(LETTER_GAP * ctx.dit_ms - duration)
                return
        if self.state == WORD:
            if ctx.reached(duration, WORD_GAP):
                ctx.emit(WORD_SPACE)
                self._goto(IDLE)
            elif not pressed:
                ctx.gap.arm(WORD_GAP * ctx.dit_ms - duration)

    def confirm(self):
        ch = self.force_emit()
        self.ctx.emit(WORD_SPACE)
        return ch

    def force_emit(self):
        ch = self.ctx.flush()
        self.reset()
        return ch

    def reset(self):
        self.ctx.reset()
        self.state = IDLE

    def set_wpm(self, wpm: float):
        self.ctx.set_wpm(wpm)

    def peek_partial_code(self) -> str:
        return self.ctx.buffer.peek_partial_code()

    def show(self) -> str:
        return self.ctx.buffer.show()


class IambicDecoder:
    """
    Keyer iambico a due palette.
    - una paletta tenuta: ripete il suo elemento
    - entrambe (squeeze): alterna punto/linea partendo dall'ultimo inviato
    - rilascio di una sola paletta dello squeeze: continua con quella rimasta

    Il generatore alterna mezza fase ON (1 dit punto, 3 dit linea) e mezza
    fase OFF (1 dit). `ringing` è vero durante la fase ON: in quel momento
    il silenzio misurato non è un gap, quindi lettere e parole non si chiudono.
    """
    name = "iambic"

    def __init__(self, context: KeyingContext):
        if context.scheduler is None:
            raise ValueError(f"{self.name} decoder needs a scheduler")
        self.ctx = context
        self.ctx.gap.callback = self._on_gap
        self._tone = OneShotTimer(context.scheduler)
        self.state = IDLE
        self.ringing = False
        self._last = 0.0

    def _on_gap(self):
        self.input(None, False)

    def _goto(self, state):
        logger.debug("%s: %s -> %s", self.name, self.state, state)
        self.state = state

    # ---------- generatore ----------
    def _start_generator(self, dit: bool):
        if not self._tone.pending:
            self._cycle(dit)

    def _cycle(self, dit: bool):
        ctx = self.ctx
        self.ringing = not self.ringing
        if self.ringing:
            if self.state == HOLD_BOTH:
                dit = not dit
            elif self.state == HOLD_DOT:
                dit = True
            elif self.state == HOLD_DASH:
                dit = False
            else:
                self.ringing = False
                return
            ctx.element_start()
            ctx.buffer.commit(DOT if dit else DASH)
            length = ctx.dit_ms if dit else DASH_LENGTH * ctx.dit_ms
            self._tone.arm(length, lambda: self._cycle(dit))
        else:
            self._last = ctx.now()
            ctx.element_end()
            if self.state in HOLD_STATES:
                self._tone.arm(ctx.dit_ms, lambda: self._cycle(dit))

    def _hold(self, symbol):
        self._goto(HOLD_DOT if symbol == DOT else HOLD_DASH)
        self._start_generator(self.state == HOLD_DOT)

    # ---------- eventi ----------
    def input(self, symbol, pressed: bool):
        if symbol is None:
            if pressed:
                raise InvalidSymbolError(symbol, self.name)
        elif symbol not in (DOT, DASH):
            raise InvalidSymbolError(symbol, self.name)

        now = self.ctx.now()
        duration = now - self._last

        if pressed:
            self.ctx.gap.cancel()

        if self.state == IDLE:
            if pressed:
                self._hold(symbol)

        elif self.state in HOLD_STATES:
            if pressed:
                if (self.state == HOLD_DOT and symbol == DASH) or \
                   (self.state == HOLD_DASH and symbol == DOT):
                    self._goto(HOLD_BOTH)
            elif (symbol == DOT and self.state == HOLD_DOT) or \
                 (symbol == DASH and self.state == HOLD_DASH):
                self._goto(CODE)
                self.ctx.gap.arm(WORD_GAP * self.ctx.dit_ms)
            elif self.state == HOLD_BOTH and symbol == DOT:
                self._goto(HOLD_DASH)
            elif self.state == HOLD_BOTH and symbol == DASH:
                self._goto(HOLD_DOT)

        elif self.state in (CODE, WORD):
            self._check_gaps(duration, pressed)
            if pressed:
                self._hold(symbol)

        else:
            raise InvalidStateError(self.state, self.name)

    def _check_gaps(self, duration, pressed):
        ctx = self.ctx
        if self.ringing:
            # elemento ancora in corso: ricontrolla a generatore fermo
            if not pressed:
                ctx.gap.arm(ctx.dit_ms)
            return
        if self.state == CODE:
            if ctx.reached(duration, LETTER_GAP):
                ctx.flush()
                self._goto(WORD)
            elif not pressed:
                ctx.gap.arm(LETTER_GAP * ctx.dit_ms - duration)
                return
        if self.state == WORD:
            if ctx.reached(duration, WORD_GAP):
                ctx.emit(WORD_SPACE)
                self._goto(IDLE)
            elif not pressed:
                ctx.gap.arm(WORD_GAP * ctx.dit_ms - duration)

    def confirm(self):
        ch = self.force_emit()
        self.ctx.emit(WORD_SPACE)
        return ch

    def force_emit(self):
        ch = self.ctx.flush()
        self.reset()
        return ch

    def reset(self):
        self.ctx.reset()
        self._tone.cancel()
        self.ringing = False
        self.state = IDLE

    def set_wpm(self, wpm: float):
        self.ctx.set_wpm(wpm)

    def peek_partial_code(self) -> str:
        return self.ctx.buffer.peek_partial_code()

    def show(self) -> str:
        return self.ctx.buffer.show()


DECODERS = {
    WinderDecoder.name: WinderDecoder,
    StraightKeyDecoder.name: StraightKeyDecoder,
    IambicDecoder.name: IambicDecoder,
}


def make_decoder(method: str, scheduler=None, **options):
    """method: 'winder' | 'straight' | 'iambic'. options → KeyingContext."""
    try:
        cls = DECODERS[method]
    except KeyError:
        raise ValueError(f"unknown input method {method!r}, "
                         f"expected one of {sorted(DECODERS)}") from None
    return cls(KeyingContext(scheduler, **options))
