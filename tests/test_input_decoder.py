import contextlib

import pytest

from quotes_cli.terminal.input_decoder import (
    DecoderState,
    InputDecoder,
    KeyDecoder,
    NavigationEvent,
)
from tests.fakes import no_terminal_mode


def feed_all(decoder, data):
    events = []
    for byte in data:
        event = decoder.feed(byte)
        if event is not None:
            events.append(event)
    return events


@pytest.mark.parametrize(
    "final, expected",
    [
        (b"A", NavigationEvent.UP),
        (b"B", NavigationEvent.DOWN),
        (b"C", NavigationEvent.RIGHT),
        (b"D", NavigationEvent.LEFT),
    ],
)
def test_arrow_sequences_decode_once_and_reset(final, expected):
    decoder = KeyDecoder()
    sequence = b"\x1b[" + final

    assert feed_all(decoder, sequence) == [expected]
    assert decoder.state is DecoderState.IDLE
    assert decoder.pending == b""

    assert feed_all(decoder, sequence) == [expected]


def test_ctrl_c_preempts_partial_escape():
    decoder = KeyDecoder()
    assert decoder.feed(0x1B) is None
    assert decoder.feed(0x5B) is None
    assert decoder.pending == b"\x1b["

    assert decoder.feed(0x03) is NavigationEvent.EXIT
    assert decoder.state is DecoderState.IDLE
    assert decoder.pending == b""


def test_ctrl_c_from_idle():
    assert KeyDecoder().feed(0x03) is NavigationEvent.EXIT


def test_malformed_sequence_leaves_no_state():
    decoder = KeyDecoder()
    assert feed_all(decoder, b"\x1b[Z") == []
    assert decoder.state is DecoderState.IDLE
    assert feed_all(decoder, b"\x1b[D") == [NavigationEvent.LEFT]


def test_escape_followed_by_other_byte_is_dropped():
    decoder = KeyDecoder()
    assert feed_all(decoder, b"\x1bx\x1b[C") == [NavigationEvent.RIGHT]


def test_printable_bytes_are_ignored():
    decoder = KeyDecoder()
    assert feed_all(decoder, b"hello q") == []
    assert decoder.state is DecoderState.IDLE


def test_bare_escape_keeps_waiting():
    decoder = KeyDecoder()
    assert decoder.feed(0x1B) is None
    assert decoder.state is DecoderState.SAW_ESCAPE


def make_input_decoder(data):
    stream = iter(data)
    return InputDecoder(
        fd=0,
        read_byte=lambda: next(stream, None),
        terminal_mode=no_terminal_mode,
    )


def test_next_event_skips_noise_until_arrow():
    decoder = make_input_decoder(b"xy\x1b[Z\x1b[C")
    assert decoder.next_event() is NavigationEvent.RIGHT


def test_next_event_consecutive_calls():
    decoder = make_input_decoder(b"\x1b[D\x1b[A\x03")
    assert decoder.next_event() is NavigationEvent.LEFT
    assert decoder.next_event() is NavigationEvent.UP
    assert decoder.next_event() is NavigationEvent.EXIT


def test_end_of_input_is_exit():
    decoder = make_input_decoder(b"\x1b[")
    assert decoder.next_event() is NavigationEvent.EXIT


def test_keyboard_interrupt_is_exit():
    def interrupted():
        raise KeyboardInterrupt

    decoder = InputDecoder(fd=0, read_byte=interrupted, terminal_mode=no_terminal_mode)
    assert decoder.next_event() is NavigationEvent.EXIT


def test_any_key_accepts_printable_byte():
    decoder = make_input_decoder(b"r")
    assert decoder.next_event(any_key=True) is NavigationEvent.UNRECOGNIZED


def test_any_key_still_decodes_arrows_and_ctrl_c():
    decoder = make_input_decoder(b"\x1b[B\x03")
    assert decoder.next_event(any_key=True) is NavigationEvent.DOWN
    assert decoder.next_event(any_key=True) is NavigationEvent.EXIT


def test_terminal_mode_entered_per_call():
    entered = []

    @contextlib.contextmanager
    def recording_mode(fd):
        entered.append(fd)
        yield

    stream = iter(b"\x1b[C\x1b[D")
    decoder = InputDecoder(fd=7, read_byte=lambda: next(stream, None), terminal_mode=recording_mode)
    decoder.next_event()
    decoder.next_event()

    assert entered == [7, 7]


def test_failed_read_discards_partial_sequence():
    reads = iter([0x1B, 0x5B, OSError("terminal hung up"), 0x41, 0x1B, 0x5B, 0x44])

    def read_byte():
        value = next(reads)
        if isinstance(value, Exception):
            raise value
        return value

    decoder = InputDecoder(fd=0, read_byte=read_byte, terminal_mode=no_terminal_mode)
    with pytest.raises(OSError):
        decoder.next_event()

    assert decoder.next_event() is NavigationEvent.LEFT
