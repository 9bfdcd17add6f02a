"""Test doubles for the acquisition loop and decoder."""
import contextlib

from quotes_cli.core.errors import StoreError
from quotes_cli.terminal.input_decoder import NavigationEvent


class ScriptedBackend:
    """Backend returning queued results and recording every request."""

    def __init__(self, results):
        self.results = list(results)
        self.requests = []

    async def fetch(self, request):
        self.requests.append(request)
        return self.results.pop(0)


class ScriptedDecoder:
    """Event source replaying a fixed list; falls back to EXIT when exhausted."""

    def __init__(self, events):
        self.events = list(events)
        self.calls = []

    def next_event(self, any_key=False):
        self.calls.append(any_key)
        if not self.events:
            return NavigationEvent.EXIT
        return self.events.pop(0)


class MemoryStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.appended = []

    def append(self, text, accepted_at=None):
        if self.fail:
            raise StoreError("disk full")
        self.appended.append(text)
        return len(self.appended)


@contextlib.contextmanager
def no_terminal_mode(fd):
    yield
