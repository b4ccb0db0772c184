"""Tests for the callback queue."""

from __future__ import annotations

from src.core.callbacks import CallbackQueue


def test_drain_returns_registration_order_and_clears() -> None:
    queue = CallbackQueue()
    first = lambda: None  # noqa: E731
    second = lambda: None  # noqa: E731

    queue.append(first)
    queue.append(None)
    queue.append(second)

    assert len(queue) == 2
    assert queue.drain() == [first, second]
    assert len(queue) == 0
    assert queue.drain() == []
