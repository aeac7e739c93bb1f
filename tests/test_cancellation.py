# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the cooperative cancellation token."""

from __future__ import annotations

import asyncio

import pytest

from pmdplus.cancellation import CancellationToken


def test_callbacks_fire_once() -> None:
    token = CancellationToken()
    calls: list[str] = []
    token.on_cancellation_requested(lambda: calls.append("a"))

    token.cancel()
    token.cancel()

    assert token.is_cancellation_requested
    assert calls == ["a"]


def test_unsubscribe_prevents_callback() -> None:
    token = CancellationToken()
    calls: list[str] = []
    unsubscribe = token.on_cancellation_requested(lambda: calls.append("a"))

    unsubscribe()
    token.cancel()

    assert calls == []


def test_late_subscriber_is_notified_immediately() -> None:
    token = CancellationToken()
    token.cancel()
    calls: list[str] = []

    token.on_cancellation_requested(lambda: calls.append("late"))

    assert calls == ["late"]


def test_linked_token_follows_parent() -> None:
    parent = CancellationToken()
    child, _detach = parent.linked()

    child.cancel()
    assert not parent.is_cancellation_requested

    other, _detach = parent.linked()
    detached, detach = parent.linked()
    detach()
    parent.cancel()
    assert other.is_cancellation_requested
    assert not detached.is_cancellation_requested


@pytest.mark.asyncio
async def test_wait_returns_after_cancel() -> None:
    token = CancellationToken()
    waiter = asyncio.create_task(token.wait())
    await asyncio.sleep(0)
    assert not waiter.done()

    token.cancel()

    await asyncio.wait_for(waiter, timeout=1)
