"""Typing-speed scorer.

Words are whitespace-separated tokens of the typed text; a mismatch is any
typed position whose character differs from the prompt at that index
(characters typed past the end of the prompt always mismatch).

    wpm      = words / elapsed_minutes           (0 when nothing has elapsed)
    accuracy = (typed - mismatched) / typed * 100 (100 when nothing is typed)

Both are rounded half-up to integers; accuracy is clamped to 0..100.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

SAMPLE_INTERVAL_SECONDS = 2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def count_words(text: str) -> int:
    return len(text.split())


def count_mismatches(prompt: str, typed: str) -> int:
    return sum(
        1 for i, ch in enumerate(typed)
        if i >= len(prompt) or ch != prompt[i]
    )


def compute_wpm(words: int, elapsed_seconds: float) -> int:
    minutes = elapsed_seconds / 60
    if not minutes > 0:
        return 0
    rate = words / minutes
    # Sub-normal elapsed times overflow the rate
    if not math.isfinite(rate):
        return 0
    return max(0, _round_half_up(rate))


def compute_accuracy(typed_chars: int, mismatched_chars: int) -> int:
    if typed_chars <= 0:
        return 100
    pct = (typed_chars - mismatched_chars) / typed_chars * 100
    return min(100, max(0, _round_half_up(pct)))


@dataclass(frozen=True)
class WpmSample:
    label: str
    wpm: int


@dataclass(frozen=True)
class TypingResult:
    wpm: int
    accuracy: int
    elapsed_seconds: float
    typed_chars: int
    mismatched_chars: int
    samples: tuple[WpmSample, ...] = ()


def score_typing(
    prompt: str,
    typed: str,
    elapsed_seconds: float,
    time_limit_seconds: Optional[float] = None,
) -> TypingResult:
    """Stateless scoring of a finished test. Elapsed time is capped at the limit."""
    elapsed = max(0.0, float(elapsed_seconds))
    if time_limit_seconds is not None:
        elapsed = min(elapsed, float(time_limit_seconds))
    mismatched = count_mismatches(prompt, typed)
    return TypingResult(
        wpm=compute_wpm(count_words(typed), elapsed),
        accuracy=compute_accuracy(len(typed), mismatched),
        elapsed_seconds=elapsed,
        typed_chars=len(typed),
        mismatched_chars=mismatched,
    )


@dataclass
class TypingSession:
    """A timed typing test driven by an injectable clock.

    Call ``update`` with the full input text on every change and ``tick``
    periodically; a WPM sample is recorded for each 2-second boundary the
    clock has passed. The session finishes when the time limit elapses or
    ``submit`` is called, and the result is frozen from then on.
    """

    prompt: str
    time_limit_seconds: float
    clock: Callable[[], float] = time.monotonic
    typed: str = ""
    samples: list[WpmSample] = field(default_factory=list)
    _started_at: Optional[float] = None
    _result: Optional[TypingResult] = None

    # ── lifecycle ───────────────────────────────────────────────────

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self.clock()

    @property
    def started(self) -> bool:
        return self._started_at is not None

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        if self._result is not None:
            return self._result.elapsed_seconds
        return min(self.clock() - self._started_at, self.time_limit_seconds)

    @property
    def finished(self) -> bool:
        return self._result is not None or (
            self.started and self.elapsed_seconds >= self.time_limit_seconds
        )

    # ── input ───────────────────────────────────────────────────────

    def update(self, text: str) -> None:
        """Replace the typed text; the first keystroke starts the timer."""
        if self.finished:
            self.tick()
            return
        self.start()
        self.typed = text
        self.tick()

    def tick(self) -> None:
        """Record samples for every elapsed sample boundary; finalise on timeout."""
        if not self.started or self._result is not None:
            return
        elapsed = self.elapsed_seconds
        words = count_words(self.typed)
        next_at = (len(self.samples) + 1) * SAMPLE_INTERVAL_SECONDS
        while next_at <= elapsed:
            self.samples.append(WpmSample(f"{next_at}s", compute_wpm(words, next_at)))
            next_at += SAMPLE_INTERVAL_SECONDS
        if elapsed >= self.time_limit_seconds:
            self._finalise(elapsed)

    def submit(self) -> TypingResult:
        """Finish early (or collect the result of a timed-out session)."""
        self.tick()
        if self._result is None:
            self._finalise(self.elapsed_seconds)
        return self._result  # type: ignore[return-value]

    @property
    def result(self) -> Optional[TypingResult]:
        return self._result

    # ── live metrics ────────────────────────────────────────────────

    @property
    def wpm(self) -> int:
        return compute_wpm(count_words(self.typed), self.elapsed_seconds)

    @property
    def accuracy(self) -> int:
        return compute_accuracy(len(self.typed), count_mismatches(self.prompt, self.typed))

    def _finalise(self, elapsed: float) -> None:
        scored = score_typing(self.prompt, self.typed, elapsed, self.time_limit_seconds)
        self._result = TypingResult(
            wpm=scored.wpm,
            accuracy=scored.accuracy,
            elapsed_seconds=scored.elapsed_seconds,
            typed_chars=scored.typed_chars,
            mismatched_chars=scored.mismatched_chars,
            samples=tuple(self.samples),
        )
