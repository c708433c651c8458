"""Step descriptors and the selection protocol.

A descriptor describes one unit of input: a pick list, a confirmation, a text
input or a custom interaction. Bodies build descriptors with the create_*
helpers, hand them to the driver and check what comes back with the
can_*_continue helpers before touching state.
"""

import inspect
from collections.abc import Awaitable, Callable, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:
    from wizard.context import StepContext


class Directive(Enum):
    """Non-data selections."""

    CANCEL = "cancel"
    BACK = "back"
    NOOP = "noop"


_DIRECTIVE_LABELS = {
    Directive.CANCEL: "Cancel",
    Directive.BACK: "Back",
    Directive.NOOP: "",
}


@dataclass
class PickItem:
    """One entry of a pick list. `item` is the value the body receives."""

    label: str
    item: Any = None
    description: str = ""
    detail: str = ""
    picked: bool = False


@dataclass
class DirectiveItem(PickItem):
    directive: Directive = Directive.CANCEL


@dataclass
class SeparatorItem(PickItem):
    """Visual divider; never selectable."""

    label: str = ""


@dataclass
class FlagsItem(PickItem):
    """Confirmation choice bundling a set of command flags."""

    flags: list[str] = field(default_factory=list)
    context: Any = None


@dataclass
class StepButton:
    label: str
    tooltip: str = ""


@dataclass
class StepBase:
    title: str
    placeholder: str | Callable[[int], str] = ""
    can_go_back: bool = True
    buttons: list[StepButton] = field(default_factory=list)
    on_did_click_button: Callable[[Any, StepButton], Awaitable[None]] | None = None
    keys: list[str] = field(default_factory=list)
    on_did_press_key: Callable[[Any, str, PickItem | None], Awaitable[None]] | None = None


@dataclass
class PickStep(StepBase):
    items: list[PickItem] | Awaitable[list[PickItem]] = field(default_factory=list)
    active: PickItem | None = None
    multiselect: bool = False
    allow_empty: bool = False
    is_confirmation: bool = False
    validate: Callable[[list[PickItem]], bool] | None = None

    async def resolve_items(self) -> list[PickItem]:
        """Await lazily supplied items once and keep the result on the step."""
        if inspect.isawaitable(self.items):
            self.items = list(await self.items)
        return self.items

    def placeholder_text(self) -> str:
        if callable(self.placeholder):
            count = len(self.items) if isinstance(self.items, list) else 0
            return self.placeholder(count)
        return self.placeholder


@dataclass
class ConfirmStep(PickStep):
    is_confirmation: bool = True


@dataclass
class InputStep(StepBase):
    prompt: str = ""
    value: str = ""
    validation_message: str | None = None
    validate: Callable[[str], Awaitable[tuple[bool, str | None]]] | None = None
    # Set while a button or key handler runs; nothing renders a frozen step.
    frozen: bool = False

    @contextmanager
    def freeze(self) -> Iterator["InputStep"]:
        """Disable input while a side-action runs; resumes on exit, once."""
        if self.frozen:
            yield self
            return
        self.frozen = True
        try:
            yield self
        finally:
            self.frozen = False

    def placeholder_text(self) -> str:
        if callable(self.placeholder):
            return self.placeholder(0)
        return self.placeholder


@dataclass
class CustomStep:
    """Escape hatch: show() runs its own interaction and returns a value or Directive.BACK."""

    title: str
    show: Callable[["CustomStep"], Awaitable[Any]]
    can_go_back: bool = True


StepDescriptor = PickStep | InputStep | CustomStep


def create_directive_item(
    directive: Directive, label: str | None = None, *, detail: str = ""
) -> DirectiveItem:
    return DirectiveItem(
        label=label if label is not None else _DIRECTIVE_LABELS[directive],
        detail=detail,
        directive=directive,
    )


def create_flags_item(
    current: Sequence[str],
    flags: Sequence[str],
    label: str,
    *,
    description: str = "",
    detail: str = "",
    context: Any = None,
) -> FlagsItem:
    """Build a confirmation item; it starts picked when its flags match the current ones."""
    return FlagsItem(
        label=label,
        item=list(flags),
        description=description,
        detail=detail,
        picked=sorted(current) == sorted(flags),
        flags=list(flags),
        context=context,
    )


def create_pick_step(title: str, items: list[PickItem] | Awaitable[list[PickItem]], **options: Any) -> PickStep:
    return PickStep(title=title, items=items, **options)


def create_input_step(title: str, **options: Any) -> InputStep:
    return InputStep(title=title, **options)


def create_custom_step(title: str, show: Callable[[CustomStep], Awaitable[Any]], **options: Any) -> CustomStep:
    return CustomStep(title=title, show=show, **options)


def create_confirm_step(
    title: str,
    confirmations: list[PickItem],
    context: "StepContext",
    cancel: DirectiveItem | None = None,
    **options: Any,
) -> ConfirmStep:
    """Confirmation list: the given choices, a separator, then Cancel.

    The first picked confirmation (or the first one) starts highlighted.
    """
    options.setdefault("placeholder", f"Confirm {context.title}")
    active = next((c for c in confirmations if c.picked), confirmations[0] if confirmations else None)
    return ConfirmStep(
        title=title,
        items=[*confirmations, SeparatorItem(), cancel or create_directive_item(Directive.CANCEL)],
        active=active,
        **options,
    )


def is_directive(value: Any) -> bool:
    return isinstance(value, Directive)


def selection_directives(selection: Any) -> set[Directive]:
    """Directives present in a selection, whether bare or as pick items."""
    if isinstance(selection, Directive):
        return {selection}
    if isinstance(selection, list):
        return {i.directive for i in selection if isinstance(i, DirectiveItem)}
    return set()


def can_step_continue(step: StepDescriptor, selection: Any) -> bool:
    return selection is not None and not is_directive(selection)


def can_pick_step_continue(step: PickStep, selection: Any) -> bool:
    """False for directives anywhere in the selection and for empty selections."""
    if not can_step_continue(step, selection):
        return False
    items = list(selection)
    if not items and not step.allow_empty:
        return False
    if any(isinstance(i, DirectiveItem) for i in items):
        return False
    if step.validate is not None:
        return bool(step.validate(items))
    return True


async def can_input_step_continue(step: InputStep, value: Any) -> bool:
    if not can_step_continue(step, value):
        return False
    if step.validate is None:
        return True
    valid, _ = await step.validate(value)
    return valid
