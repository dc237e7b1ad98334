# cwkey/traversal.py
"""
TraversalIndex: il carattere "in costruzione".
Ogni decoder ne possiede uno; non va mai condiviso tra decoder.
"""
import logging

from cwkey.morse_table import DOT, DASH, UNKNOWN_GLYPH, step
from cwkey.errors import InvalidSymbolError

logger = logging.getLogger(__name__)


class TraversalIndex:
    def __init__(self, table):
        self.table = table
        self.index = 0          # 0 = nessun simbolo inserito
        self._spill = ""        # simboli oltre l'ultimo livello dell'albero

    # ---------- commit ----------
    def commit(self, symbol: str):
        if symbol not in (DOT, DASH):
            raise InvalidSymbolError(symbol)
        nxt = step(self.index, symbol)
        if self._spill or nxt >= self.table.size:
            # fuori albero: l'indice resta valido, il carattere sarà sconosciuto
            if not self._spill:
                logger.warning("code longer than any table entry, dropping to unknown")
            self._spill += symbol
            return
        self.index = nxt

    def commit_dot(self):
        self.commit(DOT)

    def commit_dash(self):
        self.commit(DASH)

    # ---------- lettura ----------
    def peek_partial_code(self) -> str:
        """Codice percorso finora, senza consumarlo."""
        symbols = []
        index = self.index
        while index > 0:
            symbols.append(DOT if index % 2 == 1 else DASH)
            index = (index - 1) // 2
        return "".join(reversed(symbols)) + self._spill

    def current_char(self):
        if self._spill:
            return None
        return self.table.char_at(self.index)

    def show(self) -> str:
        # per il display live: "A .-", "? ..--"
        return f"{self.current_char() or UNKNOWN_GLYPH} {self.peek_partial_code()}"

    def is_empty(self) -> bool:
        return self.index == 0 and not self._spill

    # ---------- reset ----------
    def reset(self):
        self.index = 0
        self._spill = ""

    def reset_and_decode(self):
        """
        Legge il carattere corrente e azzera.
        None se il buffer era vuoto oppure la posizione non ha carattere.
        """
        if self.is_empty():
            return None
        ch = self.current_char()
        if ch is None:
            logger.debug("unknown code %s", self.peek_partial_code())
        self.reset()
        return ch
