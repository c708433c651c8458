"""Base class for wizard commands."""

import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from wizard.context import StepContext
from wizard.errors import InvalidStateError
from wizard.outcome import StepOutcome

if TYPE_CHECKING:
    from wizard.host import WizardHost
    from wizard.registry import WizardInvocation

logger = logging.getLogger(__name__)

S = TypeVar("S")


class WizardCommand(ABC, Generic[S]):
    """One guided flow ending in a single terminal action.

    Subclasses declare `key`, `label`, `title` and `state_type` (a dataclass),
    and implement `create_context()` and the `steps()` body.
    """

    key: ClassVar[str]
    label: ClassVar[str]
    title: ClassVar[str]
    description: ClassVar[str] = ""
    state_type: ClassVar[type]

    def __init__(self, host: "WizardHost", invocation: "WizardInvocation | None" = None) -> None:
        self.host = host
        self.started_from: str | None = invocation.started_from if invocation else None
        self.picked_via = "menu" if self.started_from == "menu" else "command"
        self.initial_state: dict[str, Any] = {}
        if invocation is not None:
            self.initial_state.update(invocation.state)
            if invocation.confirm is not None:
                self.initial_state["confirm"] = invocation.confirm
            if invocation.result is not None:
                self.initial_state["result"] = invocation.result

    @property
    def can_confirm(self) -> bool:
        return True

    @property
    def can_skip_confirm(self) -> bool:
        return True

    @property
    def skip_confirm_key(self) -> str:
        return f"{self.key}:{self.picked_via}"

    def confirm(self, override: bool | None = None) -> bool:
        """Whether the confirmation step should be shown."""
        if not self.can_confirm or not self.can_skip_confirm:
            return True
        if override is not None:
            return override
        return self.skip_confirm_key not in self.host.skip_confirmations

    def create_state(self, partial: dict[str, Any] | None = None) -> S:
        """Dataclass defaults, then initial_state, then `partial`."""
        values = {**self.initial_state, **(partial or {})}
        names = {f.name for f in dataclasses.fields(self.state_type)}
        unknown = sorted(set(values) - names)
        if unknown:
            raise InvalidStateError(f"{self.key}: unknown state fields {unknown}")
        return self.state_type(**values)

    @abstractmethod
    def create_context(self, parent: StepContext | None = None) -> StepContext:
        """Fresh context, or one derived from `parent` for a nested run."""

    @abstractmethod
    async def steps(self, state: S, context: StepContext) -> StepOutcome[Any]:
        """The wizard body."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.key} via {self.picked_via}>"
