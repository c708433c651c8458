"""Contracts between the driver and whatever draws steps and messages.

A renderer returns one event per call: a selection (list of pick items, input
text or a Directive), a ButtonClicked or KeyPressed side event, or None when
the user dismissed the step (treated as cancellation).
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from wizard.steps import InputStep, PickItem, PickStep, StepButton


class MessageLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ButtonClicked:
    button: StepButton


@dataclass(frozen=True)
class KeyPressed:
    key: str
    item: PickItem | None = None


@runtime_checkable
class StepRenderer(Protocol):
    """Draws pick, confirm and input steps."""

    async def render(self, step: PickStep | InputStep) -> Any:
        """One event for this step; None means dismissed."""


@runtime_checkable
class HostUI(Protocol):
    """Messages and dialogs outside the step flow."""

    async def show_message(
        self, level: MessageLevel, message: str, *choices: str, modal: bool = False
    ) -> str | None:
        """Show a message; with choices, return the one picked or None."""

    async def choose_folder(self, title: str, default: Path | None = None) -> Path | None:
        """Ask for a folder; None when dismissed."""
