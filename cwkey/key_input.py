# cwkey/key_input.py
"""
Gestione input da tastiera (Qt):
- tasti punto / linea: palette iambiche o winder
- Spazio: tasto verticale quando il metodo è "straight", altrimenti conferma
- Invio: conferma (lettera + spazio)
Debounce sulle pressioni, auto-repeat ignorato.
Espone bind/unbind per collegarsi a una QApplication.
"""
import time
from PyQt5.QtCore import QObject, QEvent, Qt

from cwkey.morse_table import DOT, DASH

DOT_KEYS = (Qt.Key_Period, Qt.Key_BracketLeft, Qt.Key_Left)
DASH_KEYS = (Qt.Key_Minus, Qt.Key_BracketRight, Qt.Key_Right)
STRAIGHT_KEYS = (Qt.Key_Space,)
CONFIRM_KEYS = (Qt.Key_Return, Qt.Key_Enter, Qt.Key_Space)


class KeyerFilter(QObject):
    def __init__(self, session, dot_keys=DOT_KEYS, dash_keys=DASH_KEYS,
                 straight_keys=STRAIGHT_KEYS, confirm_keys=CONFIRM_KEYS,
                 debounce_ms=2):
        super().__init__()
        self.session = session
        self.dot_keys = tuple(dot_keys)
        self.dash_keys = tuple(dash_keys)
        self.straight_keys = tuple(straight_keys)
        self.confirm_keys = tuple(confirm_keys)
        self.debounce = debounce_ms / 1000.0
        self._last = {}
        self._pressed = set()

    def _symbol_for(self, key):
        if self.session.method == "straight" and key in self.straight_keys:
            return DOT          # il verticale ignora l'identità del tasto
        if key in self.dot_keys:
            return DOT
        if key in self.dash_keys:
            return DASH
        return None

    def eventFilter(self, obj, ev):
        if ev.type() not in (QEvent.KeyPress, QEvent.KeyRelease):
            return False
        key = ev.key()
        pressed = ev.type() == QEvent.KeyPress
        symbol = self._symbol_for(key)

        if symbol is None:
            if key in self.confirm_keys:
                if pressed and not ev.isAutoRepeat():
                    self.session.confirm()
                return True
            return False

        if ev.isAutoRepeat():
            return True
        if pressed:
            now = time.perf_counter()
            if key in self._pressed or (now - self._last.get(key, -1e9)) < self.debounce:
                return True
            self._pressed.add(key)
            self._last[key] = now
        else:
            now = time.perf_counter()
            if key not in self._pressed or (now - self._last.get(key, -1e9)) < self.debounce:
                return True
            self._pressed.discard(key)
            self._last[key] = now
        self.session.input(symbol, pressed)
        return True


class KeyInput:
    def __init__(self, app):
        self.app = app
        self._filter = None

    def bind(self, session, **keys):
        self.unbind()
        self._filter = KeyerFilter(session, **keys)
        self.app.installEventFilter(self._filter)
        return self._filter

    def unbind(self):
        if self._filter:
            self.app.removeEventFilter(self._filter)
            self._filter = None
