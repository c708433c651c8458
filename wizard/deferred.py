"""Deferred result: an externally settled outcome of one wizard invocation.

The caller creates it and passes it as `WizardInvocation.result`; the wizard
body resolves it on success and its `finally` guard cancels it otherwise.
Exactly one settlement takes effect; later calls are ignored.
"""

import asyncio
import logging
from typing import Generic, TypeVar

from wizard.errors import WizardCancelledError

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Deferred(Generic[R]):
    def __init__(self) -> None:
        self._settled = asyncio.Event()
        self._value: R | None = None
        self._error: BaseException | None = None

    @property
    def pending(self) -> bool:
        return not self._settled.is_set()

    @property
    def cancelled(self) -> bool:
        return self._settled.is_set() and self._error is not None

    def resolve(self, value: R) -> bool:
        """Settle with a value. Returns False if already settled."""
        if not self.pending:
            logger.debug("Deferred already settled; ignoring resolve")
            return False
        self._value = value
        self._settled.set()
        return True

    def cancel(self, reason: BaseException | None = None) -> bool:
        """Settle as cancelled. Returns False if already settled."""
        if not self.pending:
            logger.debug("Deferred already settled; ignoring cancel")
            return False
        self._error = reason if reason is not None else WizardCancelledError("Cancelled")
        self._settled.set()
        return True

    async def wait(self) -> R:
        """Wait for settlement; raises the cancellation reason if cancelled."""
        await self._settled.wait()
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        state = "pending" if self.pending else ("cancelled" if self.cancelled else "resolved")
        return f"<Deferred {state}>"


def cancel_if_pending(result: "Deferred | None", message: str) -> None:
    """Cancel a still-pending deferred with WizardCancelledError(message)."""
    if result is not None and result.pending:
        result.cancel(WizardCancelledError(message))
