"""Step navigation: which step is current, where Back goes, when a flow is complete.

Usage inside a wizard body::

    with StepsController(context, command) as steps:
        while not steps.is_complete:
            if steps.is_at_step(Steps.PICK_REF) or state.reference is None:
                with steps.enter_step(Steps.PICK_REF) as step:
                    result = await pick_reference_step(state, context)
                    if isinstance(result, Break):
                        if step.go_back() is None:
                            break
                        continue
                    state.reference = result.value
            ...
            steps.mark_steps_complete()

History is a stack of lists: one list per (nested) controller, so a nested
wizard backing out of its first step lands on the step of its parent that
launched it.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wizard.context import StepContext

logger = logging.getLogger(__name__)


@dataclass
class StepsNavigation:
    """Navigation state shared by every controller of one wizard run."""

    current_step: str | None = None
    history: list[list[str]] = field(default_factory=list)
    completed: bool = False
    cancelled: bool = False
    started_from: str | None = None


class StepFrame:
    """Handle for one entered step. Leaving the `with` block settles the step."""

    def __init__(self, nav: StepsNavigation, step: str) -> None:
        self._nav = nav
        self.step = step
        self.went_back = False
        self.skipped = False

    def __enter__(self) -> "StepFrame":
        return self

    def __exit__(self, *exc: Any) -> None:
        if not self.went_back and self._nav.current_step == self.step:
            self._nav.current_step = None

    def go_back(self) -> str | None:
        self.went_back = True
        return _go_back(self._nav)

    def skip(self) -> None:
        """Drop this step from the back-navigation stack."""
        self.skipped = True
        history = self._nav.history[-1] if self._nav.history else None
        if history and history[-1] == self.step:
            history.pop()


def _go_back(nav: StepsNavigation) -> str | None:
    nav.completed = False
    if nav.cancelled:
        nav.current_step = None
        return None

    history = nav.history[-1] if nav.history else []
    if history:
        history.pop()
    previous = history[-1] if history else None
    if previous is None:
        if len(nav.history) > 1:
            outer = nav.history[-2]
            nav.current_step = outer[-1] if outer else None
        else:
            nav.current_step = None
        return None

    nav.current_step = previous
    return previous


class StepsController:
    """Per-wizard navigation over a StepsNavigation shared through the context."""

    def __init__(self, context: "StepContext", command: Any = None) -> None:
        self._context = context
        nav = context.steps
        if nav is None or (command is not None and not nav.history):
            nav = StepsNavigation(
                cancelled=nav.cancelled if nav is not None else False,
                started_from=getattr(command, "started_from", None),
            )
            context.steps = nav
        self._nav = nav
        self._frame: StepFrame | None = None

    def __enter__(self) -> "StepsController":
        # A nested wizard starts with no step of its own selected.
        self._nav.history.append([])
        self._nav.current_step = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self.dispose()

    def dispose(self) -> None:
        if self._nav.history:
            self._nav.history.pop()
        if self._nav.completed:
            return
        outer = self._nav.history[-1] if self._nav.history else None
        self._nav.current_step = outer[-1] if outer else None

    @property
    def navigation(self) -> StepsNavigation:
        return self._nav

    @property
    def current_step(self) -> str | None:
        return self._nav.current_step

    @property
    def is_complete(self) -> bool:
        return self._nav.completed

    @property
    def can_go_back(self) -> bool:
        history = self._nav.history[-1] if self._nav.history else []
        if len(history) > 1 or len(self._nav.history) > 1:
            return True
        return self._nav.started_from == "menu"

    def enter_step(self, step: str) -> StepFrame:
        nav = self._nav
        if not nav.history:
            nav.history.append([])
        history = nav.history[-1]
        if step in history[:-1]:
            history.remove(step)
        if not history or history[-1] != step:
            history.append(step)
        nav.current_step = step
        nav.completed = False
        logger.debug("Entered step %s (history=%s)", step, history)
        self._frame = StepFrame(nav, step)
        return self._frame

    def is_at_step(self, step: str) -> bool:
        return self._nav.current_step == step

    def is_at_step_or_unset(self, step: str) -> bool:
        return self._nav.current_step is None or self._nav.current_step == step

    def skip(self) -> None:
        if self._frame is not None and self._frame.step == self._nav.current_step:
            self._frame.skip()

    def go_back(self) -> str | None:
        if self._frame is not None and self._frame.step == self._nav.current_step:
            return self._frame.go_back()
        return _go_back(self._nav)

    def go_back_to_step(self, step: str) -> None:
        """Rewind history to `step` and make it current."""
        nav = self._nav
        nav.completed = False
        if not nav.history:
            nav.history.append([])
        history = nav.history[-1]
        if step in history:
            del history[history.index(step) + 1 :]
        else:
            history[:] = [step]
        nav.current_step = step

    def mark_steps_complete(self) -> None:
        self._nav.completed = True
        self._nav.current_step = None
