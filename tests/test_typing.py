"""Typing-speed scorer: stateless scoring and the clocked session."""

from __future__ import annotations

import pytest

from optitalent.assessments.typing import (
    TypingSession,
    WpmSample,
    compute_accuracy,
    compute_wpm,
    count_mismatches,
    count_words,
    score_typing,
)

PROMPT = "The quick brown fox jumps over the lazy dog"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ═════════════════════════════════════════════════════════════════════
# Pure helpers
# ═════════════════════════════════════════════════════════════════════


class TestHelpers:
    def test_count_words_ignores_extra_whitespace(self):
        assert count_words("  the  quick\tbrown\nfox  ") == 4
        assert count_words("   ") == 0

    def test_mismatches_past_prompt_end_count(self):
        assert count_mismatches("abc", "abcde") == 2
        assert count_mismatches("abc", "xbc") == 1
        assert count_mismatches("abc", "") == 0

    def test_wpm_zero_elapsed(self):
        assert compute_wpm(10, 0) == 0

    def test_wpm_rounds_half_up(self):
        # 5 words in 12 s -> 25 wpm exactly; 1 word in 24 s -> 2.5 -> 3
        assert compute_wpm(5, 12) == 25
        assert compute_wpm(1, 24) == 3

    def test_accuracy_empty_input_is_100(self):
        assert compute_accuracy(0, 0) == 100

    def test_accuracy_clamped(self):
        assert compute_accuracy(4, 4) == 0
        assert compute_accuracy(3, 1) == 67


# ═════════════════════════════════════════════════════════════════════
# score_typing
# ═════════════════════════════════════════════════════════════════════


class TestScoreTyping:
    def test_verbatim_prompt_is_fully_accurate(self):
        result = score_typing(PROMPT, PROMPT, 60)
        assert result.accuracy == 100
        assert result.wpm == 9
        assert result.mismatched_chars == 0

    def test_elapsed_capped_at_limit(self):
        result = score_typing(PROMPT, PROMPT, elapsed_seconds=600, time_limit_seconds=60)
        assert result.elapsed_seconds == 60
        assert result.wpm == 9

    def test_typos_reduce_accuracy(self):
        typed = "Thx quick"  # one wrong char out of nine
        result = score_typing(PROMPT, typed, 30)
        assert result.mismatched_chars == 1
        assert result.accuracy == 89
        assert result.wpm == 4

    @pytest.mark.parametrize(
        "typed,elapsed",
        [
            ("", 0),
            ("zzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzzz", 5),
            (PROMPT + " and then some more words", 1),
            ("\n\n\t", 0.5),
            (PROMPT, 5e-324),
            (PROMPT, 1e-308),
            (PROMPT, float("inf")),
        ],
    )
    def test_bounds_hold_for_any_input(self, typed, elapsed):
        result = score_typing(PROMPT, typed, elapsed)
        assert 0 <= result.accuracy <= 100
        assert result.wpm >= 0

    def test_negative_elapsed_treated_as_zero(self):
        assert score_typing(PROMPT, "The", -5).wpm == 0


# ═════════════════════════════════════════════════════════════════════
# TypingSession
# ═════════════════════════════════════════════════════════════════════


class TestTypingSession:
    def test_first_keystroke_starts_timer(self):
        clock = FakeClock()
        session = TypingSession(PROMPT, time_limit_seconds=60, clock=clock)
        assert not session.started
        clock.advance(10)
        session.update("T")
        assert session.started
        assert session.elapsed_seconds == 0

    def test_samples_every_two_seconds(self):
        clock = FakeClock()
        session = TypingSession(PROMPT, time_limit_seconds=60, clock=clock)
        session.update("The")
        clock.advance(5)
        session.update("The quick")
        assert session.samples == [WpmSample("2s", 60), WpmSample("4s", 30)]

    def test_times_out_at_limit_and_freezes(self):
        clock = FakeClock()
        session = TypingSession(PROMPT, time_limit_seconds=10, clock=clock)
        session.update("The quick")
        clock.advance(12)
        session.tick()
        assert session.finished
        result = session.result
        assert result is not None
        assert result.elapsed_seconds == 10
        assert result.wpm == 12
        assert [s.label for s in result.samples] == ["2s", "4s", "6s", "8s", "10s"]

        clock.advance(5)
        session.update("The quick brown fox")
        assert session.typed == "The quick"
        assert session.result is result

    def test_submit_early(self):
        clock = FakeClock()
        session = TypingSession(PROMPT, time_limit_seconds=60, clock=clock)
        session.update("The quick brown")
        clock.advance(30)
        session.update("The quick brown fox jumps")
        result = session.submit()
        assert session.finished
        assert result.elapsed_seconds == 30
        assert result.wpm == 10
        assert result.accuracy == 100
        assert len(result.samples) == 15

    def test_submit_is_idempotent(self):
        clock = FakeClock()
        session = TypingSession(PROMPT, time_limit_seconds=60, clock=clock)
        session.update("The")
        clock.advance(3)
        first = session.submit()
        clock.advance(30)
        assert session.submit() is first
