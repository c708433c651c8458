"""What a running wizard can reach outside itself."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wizard.render.base import HostUI
from wizard.settings import get_setting

if TYPE_CHECKING:
    from wizard.registry import CommandRegistry, WizardInvocation


@dataclass
class WizardHost:
    """Registry, settings and host UI shared by every wizard of a session."""

    registry: "CommandRegistry"
    settings: dict[str, Any]
    ui: HostUI
    queued: list["WizardInvocation"] = field(default_factory=list, init=False)

    def execute_later(self, invocation: "WizardInvocation") -> None:
        """Start `invocation` as a new top-level flow once the current one ends."""
        self.queued.append(invocation)

    @property
    def skip_confirmations(self) -> list[str]:
        return list(get_setting(self.settings, "wizards.skip_confirmations", []) or [])
