"""Multi-step wizard engine: steps, navigation, driver and composition."""

from wizard.command import WizardCommand
from wizard.context import StepChannel, StepContext
from wizard.controller import StepFrame, StepsController, StepsNavigation
from wizard.deferred import Deferred
from wizard.driver import WizardDriver, WizardRun
from wizard.host import WizardHost
from wizard.outcome import BREAK, Break, Continue, StepOutcome, is_break
from wizard.registry import CommandRegistry, WizardInvocation, run_nested

__all__ = [
    "BREAK",
    "Break",
    "CommandRegistry",
    "Continue",
    "Deferred",
    "StepChannel",
    "StepContext",
    "StepFrame",
    "StepOutcome",
    "StepsController",
    "StepsNavigation",
    "WizardCommand",
    "WizardDriver",
    "WizardHost",
    "WizardInvocation",
    "WizardRun",
    "is_break",
    "run_nested",
]
