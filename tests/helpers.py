# tests/helpers.py
# Test doubles shared across test packages

from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator

from snippetsync.services.code_generator import generate_candidate

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current += timedelta(seconds=seconds)
        return self.current

    def set(self, offset_seconds: float) -> datetime:
        """Jump to T0 + offset_seconds."""
        self.current = T0 + timedelta(seconds=offset_seconds)
        return self.current


class ScriptedCandidates:
    """Candidate source that replays a fixed list, then falls back to random codes."""

    def __init__(self, codes: Iterable[str]):
        self._codes: Iterator[str] = iter(codes)
        self.drawn: list[str] = []

    def __call__(self) -> str:
        code = next(self._codes, None) or generate_candidate()
        self.drawn.append(code)
        return code
