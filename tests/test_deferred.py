"""Tests for Deferred settlement."""

import asyncio

import pytest

from wizard.deferred import Deferred, cancel_if_pending
from wizard.errors import WizardCancelledError


class TestDeferred:
    @pytest.mark.asyncio
    async def test_resolve_then_wait(self) -> None:
        result: Deferred[str] = Deferred()
        assert result.pending
        assert result.resolve("done") is True
        assert not result.pending
        assert not result.cancelled
        assert await result.wait() == "done"

    @pytest.mark.asyncio
    async def test_cancel_raises_on_wait(self) -> None:
        result: Deferred[str] = Deferred()
        result.cancel(WizardCancelledError("gone"))
        assert result.cancelled
        with pytest.raises(WizardCancelledError, match="gone"):
            await result.wait()

    @pytest.mark.asyncio
    async def test_cancel_without_reason(self) -> None:
        result: Deferred[int] = Deferred()
        result.cancel()
        with pytest.raises(WizardCancelledError):
            await result.wait()

    @pytest.mark.asyncio
    async def test_settles_exactly_once(self) -> None:
        result: Deferred[str] = Deferred()
        assert result.resolve("first")
        assert result.resolve("second") is False
        assert result.cancel() is False
        assert await result.wait() == "first"

    @pytest.mark.asyncio
    async def test_wait_blocks_until_settled(self) -> None:
        result: Deferred[int] = Deferred()
        waiter = asyncio.create_task(result.wait())
        await asyncio.sleep(0)
        assert not waiter.done()
        result.resolve(7)
        assert await waiter == 7

    def test_repr_reflects_state(self) -> None:
        result: Deferred[int] = Deferred()
        assert "pending" in repr(result)
        result.cancel()
        assert "cancelled" in repr(result)


class TestCancelIfPending:
    @pytest.mark.asyncio
    async def test_cancels_pending(self) -> None:
        result: Deferred[int] = Deferred()
        cancel_if_pending(result, "Push Stash cancelled")
        assert result.cancelled
        with pytest.raises(WizardCancelledError, match="Push Stash cancelled"):
            await result.wait()

    @pytest.mark.asyncio
    async def test_leaves_resolved_alone(self) -> None:
        result: Deferred[int] = Deferred()
        result.resolve(1)
        cancel_if_pending(result, "ignored")
        assert await result.wait() == 1

    def test_accepts_none(self) -> None:
        cancel_if_pending(None, "nothing to do")
