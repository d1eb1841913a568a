"""Tests for codedoc.cancellation."""

from __future__ import annotations

from codedoc.cancellation import CancellationToken, is_cancelled


def test_manual_cancel() -> None:
    token = CancellationToken()

    assert token.cancelled is False
    token.cancel()
    assert token.cancelled is True


def test_deadline_expires_with_clock() -> None:
    now = [0.0]
    token = CancellationToken.with_timeout(2.0, clock=lambda: now[0])

    now[0] = 1.9
    assert token.cancelled is False
    now[0] = 2.0
    assert token.cancelled is True
    # Once expired the token stays cancelled.
    now[0] = 0.0
    assert token.cancelled is True


def test_is_cancelled_accepts_missing_token() -> None:
    assert is_cancelled(None) is False
