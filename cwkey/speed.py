# cwkey/speed.py
"""
Stima WPM da parole decodificate e tempo trascorso.
Costo in dit: punto 1, linea 3, 1 tra elementi, 3 tra caratteri,
7 per ogni parola (anche l'ultima). 1 WPM = 50 dit/minuto ("PARIS").
"""
import logging

from cwkey.morse_table import DASH_LENGTH, DEFAULT_MORSE, DOT, LETTER_GAP, MorseTable, WORD_GAP

logger = logging.getLogger(__name__)

DITS_PER_WORD = 50


def code_dits(code: str) -> int:
    dits = sum(1 if s == DOT else DASH_LENGTH for s in code)
    return dits + (len(code) - 1)          # gap tra elementi


def word_dits(word: str, table=None) -> int:
    if table is None:
        table = DEFAULT_MORSE
    elif isinstance(table, MorseTable):
        table = table.codes

    dits = 0
    for c in word:
        code = table.get(c.upper())
        if code:
            dits += code_dits(code)
        elif c == " ":
            dits += WORD_GAP
        else:
            logger.warning("character %r not in Morse table, skipped", c)
    if word:
        dits += (len(word) - 1) * LETTER_GAP
    return dits


def estimate_wpm(words, elapsed_seconds: float, table=None) -> float:
    if elapsed_seconds <= 0:
        raise ValueError(f"elapsed time must be positive, got {elapsed_seconds!r}")
    words = list(words)
    dits = sum(word_dits(w, table) for w in words)
    dits += len(words) * WORD_GAP          # gap di parola, compreso l'ultimo
    dits_per_second = dits / float(elapsed_seconds)
    return dits_per_second * 60.0 / DITS_PER_WORD
