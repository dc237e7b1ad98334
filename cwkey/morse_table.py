# cwkey/morse_table.py
"""
MorseTable
----------
Tabella carattere → codice e albero binario "denso" usato da tutti i decoder.

Indicizzazione (radice = 0):
  punto  : i → 2i+1
  linea  : i → 2i+2
Dimensione = 2^(maxLen+1). Un codice che è prefisso di un altro lascia il suo
carattere su un nodo interno: la discesa non si ferma, prosegue e basta.

Uso:
  t = MorseTable()
  t.decode("-...")            # 'B'
  t.decode_text(".- -... / -.-")   # 'AB K'
"""
import logging

from cwkey.errors import InvalidSymbolError

logger = logging.getLogger(__name__)

DOT, DASH = ".", "-"

# Durate in dit
DASH_LENGTH = 3
LETTER_GAP = 3
WORD_GAP = 7

# Tabella di default (lettere, numeri, punteggiatura base)
DEFAULT_MORSE = {
    'A': '.-',   'B': '-...', 'C': '-.-.', 'D': '-..',  'E': '.',    'F': '..-.',
    'G': '--.',  'H': '....', 'I': '..',   'J': '.---', 'K': '-.-',  'L': '.-..',
    'M': '--',   'N': '-.',   'O': '---',  'P': '.--.', 'Q': '--.-', 'R': '.-.',
    'S': '...',  'T': '-',    'U': '..-',  'V': '...-', 'W': '.--',  'X': '-..-',
    'Y': '-.--', 'Z': '--..',
    '0': '-----', '1': '.----', '2': '..---', '3': '...--', '4': '....-',
    '5': '.....', '6': '-....', '7': '--...', '8': '---..', '9': '----.',
    '.': '.-.-.-', ',': '--..--', '?': '..--..', "'": '.----.', '-': '-....-',
    ';': '-.-.-.',
}

UNKNOWN_GLYPH = "?"
WORD_SEPARATOR = "/"


def step(index: int, symbol: str) -> int:
    """Un passo di discesa nell'albero."""
    if symbol == DOT:
        return 2 * index + 1
    if symbol == DASH:
        return 2 * index + 2
    raise InvalidSymbolError(symbol)


class MorseTable:
    def __init__(self, table=None):
        self._codes = {}
        self._tree = [None]
        self.install(DEFAULT_MORSE if table is None else table)

    # ---------- costruzione ----------
    def install(self, table: dict):
        """
        Costruisce l'albero dalla mappa carattere → codice.
        Collisioni: vince l'ultima voce in ordine di iterazione del dict
        (warning, mai fatale).
        """
        if not table:
            raise ValueError("empty Morse table")
        for ch, code in table.items():
            if not code:
                raise InvalidSymbolError(code, f"empty code for {ch!r}")

        max_len = max(len(code) for code in table.values())
        tree = [None] * (2 ** (max_len + 1))
        for ch, code in table.items():
            index = 0
            for symbol in code:
                if symbol not in (DOT, DASH):
                    raise InvalidSymbolError(symbol, f"code {code!r} for {ch!r}")
                index = step(index, symbol)
            if tree[index] is not None:
                logger.warning("duplicate code %s for %r and %r, keeping %r",
                               code, tree[index], ch, ch)
            tree[index] = ch

        self._codes = dict(table)
        self._tree = tree

    # ---------- accesso ----------
    @property
    def size(self) -> int:
        return len(self._tree)

    @property
    def codes(self) -> dict:
        return dict(self._codes)

    def char_at(self, index: int):
        if 0 <= index < len(self._tree):
            return self._tree[index]
        return None

    def decode(self, code: str):
        """Codice completo → carattere (None se la posizione è vuota)."""
        index = 0
        for symbol in code:
            index = step(index, symbol)
            if index >= len(self._tree):
                return None
        return self._tree[index]

    def decode_text(self, text: str) -> str:
        # lettere separate da spazi, parole da '/'
        words = []
        for word in text.split(WORD_SEPARATOR):
            chars = [self.decode(code) or UNKNOWN_GLYPH for code in word.split()]
            words.append("".join(chars))
        return " ".join(w for w in words if w)

    def dump(self):
        return [(i, ch) for i, ch in enumerate(self._tree) if ch is not None]
