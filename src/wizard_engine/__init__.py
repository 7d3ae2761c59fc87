"""Wizard Engine - multi-step form navigation over a tree of steps"""

__version__ = "0.1.0"

from .core import (
    FlowRegistry,
    Step,
    Wizard,
    WizardCodec,
    WizardObserver,
    default_registry,
    field_switch,
)
from .exceptions import (
    AmbiguousFlowError,
    ConfigurationError,
    DefinitionError,
    DuplicateStepError,
    FlowMatchError,
    SerializationError,
    StateDivergedError,
    StepAttachmentError,
    StepNotFoundError,
    UnknownFlowError,
    WizardError,
)
from .models import ErrorBag, FieldRules, NavigationOutcome, NavigationStatus
from .services import WizardStateService
from .storage import FilesystemStore, InMemoryStore, SessionStore
from .validation import RulesGateway, ValidationGateway

__all__ = [
    "FlowRegistry",
    "Step",
    "Wizard",
    "WizardCodec",
    "WizardObserver",
    "default_registry",
    "field_switch",
    "AmbiguousFlowError",
    "ConfigurationError",
    "DefinitionError",
    "DuplicateStepError",
    "FlowMatchError",
    "SerializationError",
    "StateDivergedError",
    "StepAttachmentError",
    "StepNotFoundError",
    "UnknownFlowError",
    "WizardError",
    "ErrorBag",
    "FieldRules",
    "NavigationOutcome",
    "NavigationStatus",
    "WizardStateService",
    "FilesystemStore",
    "InMemoryStore",
    "SessionStore",
    "RulesGateway",
    "ValidationGateway",
]
