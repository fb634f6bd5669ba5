"""Tests for (error, data) callback delivery."""

import pytest

from branchweb.core.callbacks import deliver
from branchweb.errors import BranchError, NotInitialized


async def succeed():
    return {"ok": True}


async def fail_with(error: Exception):
    raise error


async def test_without_callback_returns_data():
    assert await deliver(succeed()) == {"ok": True}


async def test_without_callback_raises():
    with pytest.raises(NotInitialized):
        await deliver(fail_with(NotInitialized()))


async def test_callback_invoked_once_on_success():
    calls = []

    result = await deliver(succeed(), lambda err, data: calls.append((err, data)))

    assert result == {"ok": True}
    assert calls == [(None, {"ok": True})]


async def test_callback_invoked_once_on_error():
    calls = []
    error = BranchError("nope")

    result = await deliver(fail_with(error), lambda err, data: calls.append((err, data)))

    assert result is None
    assert calls == [(error, None)]


async def test_non_branch_errors_propagate():
    """Programming errors are not routed through the callback."""
    calls = []

    with pytest.raises(KeyError):
        await deliver(fail_with(KeyError("x")), lambda err, data: calls.append((err, data)))

    assert calls == []
