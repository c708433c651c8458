"""Command registry, invocations and nested runs."""

import difflib
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wizard.command import WizardCommand
from wizard.context import StepContext
from wizard.deferred import Deferred
from wizard.errors import UnknownCommandError
from wizard.outcome import StepOutcome

if TYPE_CHECKING:
    from wizard.host import WizardHost

logger = logging.getLogger(__name__)


@dataclass
class WizardInvocation:
    """How a wizard is started: by key, with partial state and an optional result."""

    command: str
    state: dict[str, Any] = field(default_factory=dict)
    confirm: bool | None = None
    result: Deferred | None = None
    started_from: str | None = None


def _normalize(text: str) -> str:
    return " ".join(text.lower().replace("-", " ").replace("_", " ").split())


class CommandRegistry:
    """Closed set of command classes, keyed by command key."""

    def __init__(self) -> None:
        self._commands: dict[str, type[WizardCommand]] = {}

    def register(self, command: type[WizardCommand]) -> type[WizardCommand]:
        if command.key in self._commands:
            raise ValueError(f"Command already registered: {command.key}")
        self._commands[command.key] = command
        return command

    def __iter__(self) -> Iterator[type[WizardCommand]]:
        return iter(self._commands.values())

    def __contains__(self, key: object) -> bool:
        return key in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def get(self, key: str) -> type[WizardCommand]:
        try:
            return self._commands[key]
        except KeyError:
            raise UnknownCommandError(key) from None

    def find(self, text: str) -> type[WizardCommand] | None:
        """Look up by key, label or title; falls back to the closest label."""
        needle = _normalize(text)
        names: dict[str, type[WizardCommand]] = {}
        for command in self._commands.values():
            for name in (command.key, command.label, command.title):
                names.setdefault(_normalize(name), command)
        if needle in names:
            return names[needle]
        matches = difflib.get_close_matches(needle, list(names), n=1, cutoff=0.6)
        return names[matches[0]] if matches else None

    def create(
        self, key: str, host: "WizardHost", invocation: WizardInvocation | None = None
    ) -> WizardCommand:
        command = self._commands.get(key)
        if command is None:
            found = self.find(key)
            if found is None:
                raise UnknownCommandError(key)
            command = found
        return command(host, invocation)


async def run_nested(
    host: "WizardHost",
    invocation: WizardInvocation,
    context: StepContext,
    started_from: str,
) -> StepOutcome[Any]:
    """Run another wizard's body inside the current one.

    The nested wizard shares the parent's channel and navigation; its Break
    comes back to the parent unchanged.
    """
    invocation.started_from = started_from
    command = host.registry.create(invocation.command, host, invocation)
    state = command.create_state()
    nested_context = command.create_context(context)
    logger.debug("Entering nested wizard %s from %s", command.key, started_from)
    outcome = await command.steps(state, nested_context)
    logger.debug("Nested wizard %s finished: %r", command.key, outcome)
    return outcome
