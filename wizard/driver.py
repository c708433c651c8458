"""Wizard driver: runs a command body and renders the steps it asks for.

The body runs as its own task. Each `await context.show(step)` puts a
pending step on the channel; the driver renders it (possibly several times:
validation failures, side-action buttons, key presses and Noop selections
all re-render without resuming the body) and resolves the body's future with
the final selection. Cancellation from any source reaches the body as
Directive.CANCEL, and navigation is marked cancelled so the body unwinds.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

from wizard.command import WizardCommand
from wizard.context import StepChannel, StepContext
from wizard.deferred import cancel_if_pending
from wizard.host import WizardHost
from wizard.outcome import is_break
from wizard.registry import WizardInvocation
from wizard.render.base import ButtonClicked, KeyPressed, StepRenderer
from wizard.steps import (
    CustomStep,
    Directive,
    InputStep,
    PickItem,
    StepDescriptor,
    can_pick_step_continue,
    create_pick_step,
    selection_directives,
)

logger = logging.getLogger(__name__)


def _frozen(step: StepDescriptor) -> contextlib.AbstractContextManager[Any]:
    """Input steps stay frozen while one of their side-actions runs."""
    return step.freeze() if isinstance(step, InputStep) else contextlib.nullcontext()


@dataclass
class WizardRun:
    """How one top-level wizard run ended."""

    key: str
    completed: bool = False
    cancelled: bool = False
    rendered_steps: int = 0


class WizardDriver:
    def __init__(self, host: WizardHost, renderer: StepRenderer) -> None:
        self.host = host
        self.renderer = renderer
        self.runs: list[WizardRun] = []
        self._cancel = asyncio.Event()

    def cancel(self) -> None:
        """Cancel whatever step is showing; the running wizard unwinds."""
        self._cancel.set()

    async def execute(self, invocation: WizardInvocation | None = None) -> WizardRun | None:
        """Run `invocation` (or let the user pick from the menu), then queued follow-ups.

        Returns the first run, or None when the menu was dismissed.
        """
        run = await self._execute_one(invocation)
        while self.host.queued and not self._cancel.is_set():
            follow_up = self.host.queued.pop(0)
            logger.info("Starting follow-up wizard %s", follow_up.command)
            await self._execute_one(follow_up)
        return run

    async def _execute_one(self, invocation: WizardInvocation | None) -> WizardRun | None:
        if invocation is not None:
            command = self.host.registry.create(invocation.command, self.host, invocation)
            return await self.run(command)

        while True:
            key = await self._pick_command()
            if key is None:
                return None
            command = self.host.registry.create(
                key, self.host, WizardInvocation(key, started_from="menu")
            )
            run = await self.run(command)
            if run.completed or run.cancelled:
                return run

    async def _pick_command(self) -> str | None:
        items = [
            PickItem(label=command.label, item=command.key, description=command.description)
            for command in self.host.registry
        ]
        step = create_pick_step("Git Wizards", items, placeholder="Choose a command", can_go_back=False)
        selection = await self._until_cancelled(self.renderer.render(step))
        if not can_pick_step_continue(step, selection):
            return None
        return selection[0].item

    async def run(self, command: WizardCommand, state: Any = None) -> WizardRun:
        """Drive one command body to completion."""
        context = command.create_context()
        context.channel = StepChannel()
        if state is None:
            state = command.create_state()
        run = WizardRun(key=command.key)
        self.runs.append(run)

        logger.info("Starting wizard %s (via %s)", command.key, command.picked_via)
        body = asyncio.create_task(command.steps(state, context), name=f"wizard:{command.key}")
        try:
            while True:
                getter = asyncio.create_task(context.channel.next_step())
                done, _ = await asyncio.wait({body, getter}, return_when=asyncio.FIRST_COMPLETED)
                if getter not in done:
                    getter.cancel()
                    break
                pending = getter.result()
                run.rendered_steps += 1
                try:
                    selection = await self._show(pending.step, context)
                except Exception as e:
                    pending.selection.set_exception(e)
                    continue
                pending.selection.set_result(selection)
            outcome = body.result()
        except Exception:
            logger.exception("Wizard %s failed", command.key)
            raise
        finally:
            if not body.done():
                body.cancel()
            cancel_if_pending(getattr(state, "result", None), f"{command.title} cancelled")

        run.completed = not is_break(outcome)
        run.cancelled = bool(context.steps is not None and context.steps.cancelled) or self._cancel.is_set()
        logger.info(
            "Wizard %s %s after %d step(s)",
            command.key,
            "completed" if run.completed else ("cancelled" if run.cancelled else "aborted"),
            run.rendered_steps,
        )
        return run

    async def _show(self, step: StepDescriptor, context: StepContext) -> Any:
        logger.debug("Rendering step %r", step.title)
        while True:
            if isinstance(step, CustomStep):
                event = await self._until_cancelled(step.show(step))
            else:
                event = await self._until_cancelled(self.renderer.render(step))

            if event is None:
                return self._cancelled(context, step)
            if isinstance(event, ButtonClicked):
                handler = getattr(step, "on_did_click_button", None)
                if handler is not None:
                    with _frozen(step):
                        await handler(step, event.button)
                continue
            if isinstance(event, KeyPressed):
                handler = getattr(step, "on_did_press_key", None)
                if handler is not None:
                    with _frozen(step):
                        await handler(step, event.key, event.item)
                continue

            directives = selection_directives(event)
            if Directive.CANCEL in directives:
                return self._cancelled(context, step)
            if directives == {Directive.NOOP}:
                continue

            if isinstance(step, InputStep) and isinstance(event, str):
                step.value = event
                if step.validate is not None:
                    valid, message = await step.validate(event)
                    if not valid:
                        step.validation_message = message
                        logger.debug("Input for %r rejected: %s", step.title, message)
                        continue
                step.validation_message = None
            return event

    def _cancelled(self, context: StepContext, step: StepDescriptor) -> Directive:
        if context.steps is not None:
            context.steps.cancelled = True
        logger.info("Cancelled at step %r", step.title)
        return Directive.CANCEL

    async def _until_cancelled(self, awaitable: Awaitable[Any]) -> Any:
        """Await `awaitable` unless cancel() comes first; then return None."""
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.create_task(self._cancel.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
        if waiter in done:
            task.cancel()
            return None
        return task.result()
