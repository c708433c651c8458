"""Rendering surfaces for wizard steps: interactive (questionary) and scripted."""

from wizard.render.base import ButtonClicked, HostUI, KeyPressed, MessageLevel, StepRenderer
from wizard.render.prompts import QuestionaryRenderer, QuestionaryUI
from wizard.render.scripted import ScriptedRenderer, ScriptedUI

__all__ = [
    "ButtonClicked",
    "HostUI",
    "KeyPressed",
    "MessageLevel",
    "QuestionaryRenderer",
    "QuestionaryUI",
    "ScriptedRenderer",
    "ScriptedUI",
    "StepRenderer",
]
