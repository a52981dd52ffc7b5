# pylint: disable=missing-module-docstring,missing-function-docstring

from orchestrator.retry import ReconnectAttempt, next_attempt, reset_attempt


def test_attempt_counter_advances():
    attempt = reset_attempt()
    for _ in range(3):
        attempt = next_attempt(attempt)
    assert attempt == ReconnectAttempt(attempt=3)


def test_reset_starts_from_zero():
    assert reset_attempt() == ReconnectAttempt(attempt=0)
