"""Step outcomes: a body either continues with a value or breaks.

Break means "stop forward progress": the body navigates back or unwinds.
It carries no data and is never confused with a falsy value.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Continue(Generic[T]):
    """Forward progress with the value produced by a step."""

    value: T


@dataclass(frozen=True)
class Break:
    """Stop forward progress."""


BREAK = Break()

StepOutcome = Continue[T] | Break


def is_break(outcome: object) -> bool:
    return isinstance(outcome, Break)
