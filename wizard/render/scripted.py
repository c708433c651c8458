"""Headless rendering: answer steps from a script instead of a terminal.

Used for programmatic runs and tests::

    renderer = ScriptedRenderer([pick("main"), enter("feature/x"), accept()])
    run = await WizardDriver(host, renderer).execute(invocation)
    assert [s.title for s in renderer.rendered] == [...]
"""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from wizard.errors import ScriptExhaustedError
from wizard.render.base import ButtonClicked, KeyPressed, MessageLevel
from wizard.steps import (
    Directive,
    DirectiveItem,
    InputStep,
    PickItem,
    PickStep,
    SeparatorItem,
    create_directive_item,
)

logger = logging.getLogger(__name__)

Response = Callable[[PickStep | InputStep], Any]


def _selectable(step: PickStep) -> list[PickItem]:
    assert isinstance(step.items, list), "items must be resolved before answering"
    return [i for i in step.items if not isinstance(i, SeparatorItem)]


def _find(step: PickStep, label: str) -> PickItem:
    for item in _selectable(step):
        if item.label == label:
            return item
    labels = [i.label for i in _selectable(step)]
    raise LookupError(f"No item {label!r} in step {step.title!r}; have {labels}")


def pick(*labels: str) -> Response:
    """Select the items with these labels."""

    def respond(step: PickStep | InputStep) -> Any:
        assert isinstance(step, PickStep), f"expected a pick step, got {step.title!r}"
        return [_find(step, label) for label in labels]

    return respond


def pick_directive(directive: Directive, *labels: str) -> Response:
    """Select a directive, optionally together with labelled items."""

    def respond(step: PickStep | InputStep) -> Any:
        assert isinstance(step, PickStep), f"expected a pick step, got {step.title!r}"
        items = [_find(step, label) for label in labels]
        existing = next(
            (i for i in _selectable(step) if isinstance(i, DirectiveItem) and i.directive is directive),
            None,
        )
        items.append(existing or create_directive_item(directive))
        return items

    return respond


def accept() -> Response:
    """Take the highlighted item (first picked, else first selectable)."""

    def respond(step: PickStep | InputStep) -> Any:
        if isinstance(step, InputStep):
            return step.value
        if step.active is not None:
            return [step.active]
        items = _selectable(step)
        return [next((i for i in items if i.picked), items[0])]

    return respond


def enter(text: str) -> Response:
    def respond(step: PickStep | InputStep) -> Any:
        assert isinstance(step, InputStep), f"expected an input step, got {step.title!r}"
        return text

    return respond


def click(label: str) -> Response:
    def respond(step: PickStep | InputStep) -> Any:
        for button in step.buttons:
            if button.label == label:
                return ButtonClicked(button)
        raise LookupError(f"No button {label!r} in step {step.title!r}")

    return respond


def press(key: str, label: str | None = None) -> Response:
    def respond(step: PickStep | InputStep) -> Any:
        item = _find(step, label) if label is not None and isinstance(step, PickStep) else None
        return KeyPressed(key, item)

    return respond


def back() -> Response:
    return lambda step: Directive.BACK


def dismiss() -> Response:
    """Close the step without choosing anything."""
    return lambda step: None


class ScriptedRenderer:
    """Answers each rendered step with the next scripted response."""

    def __init__(self, responses: Iterable[Response] = ()) -> None:
        self._responses = list(responses)
        self.rendered: list[PickStep | InputStep] = []

    @property
    def titles(self) -> list[str]:
        return [s.title for s in self.rendered]

    @property
    def remaining(self) -> int:
        return len(self._responses)

    async def render(self, step: PickStep | InputStep) -> Any:
        if isinstance(step, PickStep):
            await step.resolve_items()
        self.rendered.append(step)
        if not self._responses:
            raise ScriptExhaustedError(f"No scripted response left for step {step.title!r}")
        response = self._responses.pop(0)
        event = response(step)
        logger.debug("Scripted response for %r: %r", step.title, event)
        return event


class ScriptedUI:
    """Records messages; answers choices and folder dialogs from queues."""

    def __init__(self, answers: Iterable[str | None] = (), folders: Iterable[Path | None] = ()) -> None:
        self._answers = list(answers)
        self._folders = list(folders)
        self.messages: list[tuple[MessageLevel, str, tuple[str, ...]]] = []
        self.folder_requests: list[str] = []

    def answer(self, *answers: str | None) -> None:
        """Queue choices for upcoming messages that offer them."""
        self._answers.extend(answers)

    def choose(self, *folders: Path | None) -> None:
        """Queue results for upcoming folder dialogs."""
        self._folders.extend(folders)

    async def show_message(
        self, level: MessageLevel, message: str, *choices: str, modal: bool = False
    ) -> str | None:
        self.messages.append((level, message, choices))
        if not choices or not self._answers:
            return None
        return self._answers.pop(0)

    async def choose_folder(self, title: str, default: Path | None = None) -> Path | None:
        self.folder_requests.append(title)
        if not self._folders:
            return None
        return self._folders.pop(0)
