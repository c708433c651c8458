"""Interactive rendering with questionary."""

from pathlib import Path
from typing import Any

import questionary
from questionary import Choice, Separator, Style

from wizard.render.base import ButtonClicked, MessageLevel
from wizard.steps import (
    Directive,
    DirectiveItem,
    InputStep,
    PickItem,
    PickStep,
    SeparatorItem,
    StepButton,
    create_directive_item,
)

STYLE = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green bold"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("instruction", "fg:ansigray italic"),
    ]
)

_LEVEL_STYLE = {
    MessageLevel.INFO: "fg:ansicyan",
    MessageLevel.WARNING: "fg:ansiyellow bold",
    MessageLevel.ERROR: "fg:ansired bold",
}

_ENTER_VALUE = "__enter__"


def _item_title(item: PickItem) -> str:
    if isinstance(item, DirectiveItem) and item.directive is Directive.BACK:
        return f"← {item.label}"
    parts = [item.label]
    if item.description:
        parts.append(f"  {item.description}")
    if item.detail:
        parts.append(f"  ({item.detail})")
    return "".join(parts)


def _has_directive(items: list[PickItem], directive: Directive) -> bool:
    return any(isinstance(i, DirectiveItem) and i.directive is directive for i in items)


class QuestionaryRenderer:
    """Terminal renderer. Direct key bindings are not offered here."""

    async def render(self, step: PickStep | InputStep) -> Any:
        if isinstance(step, InputStep):
            return await self._render_input(step)
        return await self._render_pick(step)

    async def _render_pick(self, step: PickStep) -> Any:
        items = await step.resolve_items()
        choices: list[Any] = []
        for item in items:
            if isinstance(item, SeparatorItem):
                choices.append(Separator())
            else:
                choices.append(
                    Choice(title=_item_title(item), value=item, checked=step.multiselect and item.picked)
                )
        if step.can_go_back and not _has_directive(items, Directive.BACK):
            choices.append(Choice(title="← Back", value=create_directive_item(Directive.BACK)))
        for button in step.buttons:
            choices.append(Choice(title=f"[{button.label}]", value=button))
        if not any(isinstance(c, Choice) for c in choices):
            return [create_directive_item(Directive.BACK)]

        message = step.title
        placeholder = step.placeholder_text()
        if placeholder:
            message = f"{message}: {placeholder}"

        if step.multiselect:
            answer = await questionary.checkbox(message, choices=choices, style=STYLE).ask_async()
            if answer is None:
                return None
            button = next((a for a in answer if isinstance(a, StepButton)), None)
            if button is not None:
                return ButtonClicked(button)
            return list(answer)

        default = step.active if step.active in items else None
        answer = await questionary.select(message, choices=choices, default=default, style=STYLE).ask_async()
        if answer is None:
            return None
        if isinstance(answer, StepButton):
            return ButtonClicked(answer)
        return [answer]

    async def _render_input(self, step: InputStep) -> Any:
        if step.buttons:
            actions = [Choice("Enter a value", value=_ENTER_VALUE)]
            actions.extend(Choice(b.label, value=b) for b in step.buttons)
            if step.can_go_back:
                actions.append(Choice("← Back", value=Directive.BACK))
            action = await questionary.select(step.title, choices=actions, style=STYLE).ask_async()
            if action is None:
                return None
            if isinstance(action, StepButton):
                return ButtonClicked(action)
            if isinstance(action, Directive):
                return action

        if step.validation_message:
            questionary.print(step.validation_message, style=_LEVEL_STYLE[MessageLevel.WARNING])
        instruction = step.placeholder_text() or None
        if step.can_go_back and not step.buttons:
            instruction = f"{instruction} (empty to go back)" if instruction else "(empty to go back)"
        answer = await questionary.text(
            step.prompt or step.title,
            default=step.value or "",
            instruction=instruction,
            style=STYLE,
        ).ask_async()
        if answer is None:
            return None
        if not answer and step.can_go_back and not step.buttons:
            return Directive.BACK
        return answer


class QuestionaryUI:
    """Messages and folder dialogs in the terminal."""

    async def show_message(
        self, level: MessageLevel, message: str, *choices: str, modal: bool = False
    ) -> str | None:
        questionary.print(message, style=_LEVEL_STYLE[level])
        if not choices:
            return None
        return await questionary.select("Choose an action:", choices=list(choices), style=STYLE).ask_async()

    async def choose_folder(self, title: str, default: Path | None = None) -> Path | None:
        answer = await questionary.path(
            title,
            default=str(default) if default else "",
            only_directories=True,
            style=STYLE,
        ).ask_async()
        if not answer:
            return None
        return Path(answer).expanduser()
