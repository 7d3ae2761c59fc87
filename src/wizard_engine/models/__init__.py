"""Data models for wizard engine"""
from .definition import StepDefinition, WizardDefinition
from .errors import ErrorBag
from .results import GatewayResult, NavigationOutcome, NavigationStatus, ValidationOutcome
from .rules import FieldRules, RuleSpec, coerce_rules

__all__ = [
    "StepDefinition",
    "WizardDefinition",
    "ErrorBag",
    "GatewayResult",
    "NavigationOutcome",
    "NavigationStatus",
    "ValidationOutcome",
    "FieldRules",
    "RuleSpec",
    "coerce_rules",
]
