# cwkey/errors.py
"""
Eccezioni del core di decodifica.
Solo gli errori di programmazione vengono sollevati: codici duplicati e
posizioni sconosciute vengono assorbiti (log) dal chiamante.
"""

class KeyingError(Exception):
    """Base di tutti gli errori del core."""

class InvalidSymbolError(KeyingError, ValueError):
    """Simbolo fuori da {'.', '-'} in tabella o in input."""
    def __init__(self, symbol, where: str = ""):
        self.symbol = symbol
        msg = f"invalid Morse symbol: {symbol!r}"
        if where:
            msg += f" ({where})"
        super().__init__(msg)

class InvalidStateError(KeyingError, RuntimeError):
    """Stato non previsto dalla macchina a stati."""
    def __init__(self, state, engine: str = ""):
        self.state = state
        super().__init__(f"{engine or 'engine'}: invalid state {state!r}")
