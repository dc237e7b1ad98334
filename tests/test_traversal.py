"""Tests for the traversal index."""

import logging

import pytest

from cwkey.errors import InvalidSymbolError
from cwkey.morse_table import DEFAULT_MORSE, MorseTable
from cwkey.traversal import TraversalIndex


@pytest.fixture
def buf():
    return TraversalIndex(MorseTable())


class TestTraversalIndex:
    """Test TraversalIndex class."""

    def test_commit_then_decode_all(self, buf):
        """Sequential commits decode to the original character."""
        for ch, code in DEFAULT_MORSE.items():
            for symbol in code:
                if symbol == '.':
                    buf.commit_dot()
                else:
                    buf.commit_dash()
            assert buf.reset_and_decode() == ch
            assert buf.index == 0

    def test_peek_matches_commits(self, buf):
        for symbol in '-.-.':
            buf.commit(symbol)
        assert buf.peek_partial_code() == '-.-.'

    def test_peek_is_idempotent(self, buf):
        buf.commit_dot()
        buf.commit_dash()
        assert buf.peek_partial_code() == '.-'
        assert buf.peek_partial_code() == '.-'
        assert buf.reset_and_decode() == 'A'

    def test_empty(self, buf):
        """Nothing entered: empty peek, None on decode."""
        assert buf.peek_partial_code() == ''
        assert buf.reset_and_decode() is None

    def test_unknown_position(self, buf):
        """Unknown codes reset the buffer but decode to None."""
        for symbol in '.-.-':
            buf.commit(symbol)
        assert buf.show() == '? .-.-'
        assert buf.reset_and_decode() is None
        assert buf.is_empty()

    def test_show(self, buf):
        buf.commit_dot()
        buf.commit_dash()
        assert buf.show() == 'A .-'

    def test_invalid_symbol(self, buf):
        with pytest.raises(InvalidSymbolError):
            buf.commit('x')

    def test_past_deepest_level(self, buf, caplog):
        """Symbols beyond the tree are kept for display, decode is unknown."""
        with caplog.at_level(logging.WARNING, logger='cwkey.traversal'):
            for _ in range(8):
                buf.commit_dot()
        assert 0 <= buf.index < buf.table.size
        assert buf.peek_partial_code() == '........'
        assert buf.current_char() is None
        assert buf.reset_and_decode() is None
        assert buf.peek_partial_code() == ''
        assert 'longer than any table entry' in caplog.text
