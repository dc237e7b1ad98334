"""Tests for input-method selection."""

import pytest

from cwkey.engines import IambicDecoder, StraightKeyDecoder, WinderDecoder
from cwkey.session import KeyingSession


class TestKeyingSession:
    """Test KeyingSession class."""

    def test_default_method(self, sched):
        session = KeyingSession(sched)
        assert session.method == 'straight'
        assert isinstance(session.decoder, StraightKeyDecoder)

    def test_methods(self):
        assert KeyingSession.methods() == ['iambic', 'straight', 'winder']

    def test_switch_clears_buffer(self, sched, out):
        """A partial letter never leaks into the next input method."""
        session = KeyingSession(sched, on_emit=out.append)
        session.input(None, True)
        sched.advance(50)
        session.input(None, False)
        assert session.peek_partial_code() == '.'
        old = session.decoder

        session.select('iambic')
        assert isinstance(session.decoder, IambicDecoder)
        assert session.peek_partial_code() == ''
        assert old.peek_partial_code() == ''
        sched.advance(1000)
        assert out == []
        assert sched.pending() == 0

    def test_switch_stops_generator(self, sched, out):
        session = KeyingSession(sched, method='iambic', on_emit=out.append)
        session.input('.', True)
        sched.advance(10)
        session.select('winder')
        assert isinstance(session.decoder, WinderDecoder)
        sched.advance(1000)
        assert out == []
        assert sched.pending() == 0

    def test_wpm_survives_switch(self, sched):
        session = KeyingSession(sched)
        session.set_wpm(10)
        session.select('iambic')
        assert session.decoder.ctx.dit_ms == pytest.approx(120.0)

    def test_unknown_method(self, sched):
        session = KeyingSession(sched)
        with pytest.raises(ValueError):
            session.select('bug')
        assert session.method == 'straight'

    def test_forwarding(self, sched, out):
        session = KeyingSession(sched, method='winder', on_emit=out.append)
        session.input('.', True)
        session.input('-', True)
        assert session.show() == 'A .-'
        assert session.force_emit() == 'A'
        session.input('.', True)
        session.reset()
        session.confirm()
        assert out == ['A', ' ']

    def test_timed_method_needs_scheduler(self):
        with pytest.raises(ValueError):
            KeyingSession(None, method='iambic')
