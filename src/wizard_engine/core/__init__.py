"""Core wizard engine components"""
from .codec import WizardCodec, tree_hash
from .flows import Flow, FlowRegistry, default_registry, field_switch
from .observer import (
    StateRestored,
    StepChangeReason,
    StepEntered,
    StepValidationFailed,
    WizardCompleted,
    WizardNotification,
    WizardObserver,
)
from .step import Step
from .wizard import Wizard

__all__ = [
    "WizardCodec",
    "tree_hash",
    "Flow",
    "FlowRegistry",
    "default_registry",
    "field_switch",
    "StateRestored",
    "StepChangeReason",
    "StepEntered",
    "StepValidationFailed",
    "WizardCompleted",
    "WizardNotification",
    "WizardObserver",
    "Step",
    "Wizard",
]
