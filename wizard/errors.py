"""Wizard engine errors."""


class WizardError(Exception):
    """Base class for engine errors."""


class UnknownCommandError(WizardError):
    """No command is registered under the requested key or label."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Unknown command: {command}")
        self.command = command


class InvalidStateError(WizardError):
    """A partial state names fields the command does not have."""


class WizardCancelledError(WizardError):
    """Reason a pending result was cancelled instead of resolved."""


class ScriptExhaustedError(WizardError):
    """A scripted run rendered more steps than it had responses for."""
