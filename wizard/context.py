"""Per-run step context and the channel steps travel through."""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from wizard.controller import StepsNavigation
from wizard.steps import StepDescriptor

logger = logging.getLogger(__name__)

C = TypeVar("C", bound="StepContext")


@dataclass
class PendingStep:
    """A descriptor waiting to be rendered, and where its selection goes."""

    step: StepDescriptor
    selection: asyncio.Future


class StepChannel:
    """Carries descriptors out of a running body and selections back in.

    The body awaits `show()`; the driver takes pending steps with `next_step()`
    and resolves their futures. Nested wizards share their parent's channel.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[PendingStep] = asyncio.Queue()

    async def show(self, step: StepDescriptor) -> Any:
        pending = PendingStep(step, asyncio.get_running_loop().create_future())
        await self._queue.put(pending)
        return await pending.selection

    async def next_step(self) -> PendingStep:
        return await self._queue.get()


@dataclass
class StepContext:
    """Read-mostly data shared by all steps of one wizard instance."""

    title: str
    channel: StepChannel | None = None
    steps: StepsNavigation | None = None

    async def show(self, step: StepDescriptor) -> Any:
        if self.channel is None:
            raise RuntimeError(f"{self.title}: no driver is attached to this context")
        return await self.channel.show(step)

    def derive(self, cls: type[C], **overrides: Any) -> C:
        """Context of type `cls` for a nested wizard, sharing channel and navigation."""
        names = {f.name for f in dataclasses.fields(cls) if f.init}
        values = {f.name: getattr(self, f.name) for f in dataclasses.fields(self) if f.name in names}
        values.update(overrides)
        return cls(**values)
