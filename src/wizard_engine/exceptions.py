"""Wizard Engine Exception Classes

Base exception hierarchy for the wizard navigation engine.
All custom exceptions include help_text for actionable guidance.

Configuration errors and state divergence are fatal: they signal a defect in
how the embedding application built its step tree, never a user input problem.
Validation failures are not exceptions, see ``NavigationOutcome``.
"""

from typing import List, Optional


class WizardError(Exception):
    """Base exception for all wizard engine errors

    Attributes:
        message: Human-readable error description
        help_text: Optional actionable guidance for resolving the error
    """

    def __init__(self, message: str, help_text: Optional[str] = None):
        """Initialize wizard error with message and optional help text

        Args:
            message: Error description
            help_text: Optional remediation guidance
        """
        self.message = message
        self.help_text = help_text
        super().__init__(message)

    def __str__(self) -> str:
        """Format error message with help text if available"""
        if self.help_text:
            return f"{self.message}\n\nHelp: {self.help_text}"
        return self.message


class ConfigurationError(WizardError):
    """Raised when the step tree or its flows are defined incorrectly"""


class AmbiguousFlowError(ConfigurationError):
    """Raised when a step has several children but no flow to choose between them"""

    def __init__(self, step_name: str, children: List[str]):
        """Initialize ambiguous flow error

        Args:
            step_name: Name of the branching step
            children: Names of the candidate children
        """
        message = (
            f"Step '{step_name}' has {len(children)} children "
            f"({', '.join(children)}) but no flow is defined"
        )
        help_text = (
            f"Attach a flow to '{step_name}' with Step.set_flow() that selects "
            f"exactly one child, or reduce it to a single child"
        )
        super().__init__(message, help_text)
        self.step_name = step_name
        self.children = children


class FlowMatchError(ConfigurationError):
    """Raised when a flow matches zero or several children"""

    def __init__(self, step_name: str, flow_key: str, matched: List[str]):
        """Initialize flow match error

        Args:
            step_name: Name of the step whose flow was evaluated
            flow_key: Registry key of the flow
            matched: Names of the children the flow accepted
        """
        if matched:
            message = (
                f"Flow '{flow_key}' on step '{step_name}' matched "
                f"{len(matched)} children: {', '.join(matched)}"
            )
        else:
            message = f"Flow '{flow_key}' on step '{step_name}' matched no child"

        help_text = "A flow must return True for exactly one candidate child"
        super().__init__(message, help_text)
        self.step_name = step_name
        self.flow_key = flow_key
        self.matched = matched


class StepNotFoundError(ConfigurationError):
    """Raised when a step name does not exist in the wizard's tree"""

    def __init__(self, step_name: str, available: Optional[List[str]] = None):
        """Initialize step lookup error

        Args:
            step_name: The name that could not be resolved
            available: Step names present in the tree
        """
        message = f"Step '{step_name}' not found"
        help_text = None
        if available:
            help_text = "Known steps:\n" + "\n".join(f"  - {name}" for name in available)
        super().__init__(message, help_text)
        self.step_name = step_name
        self.available = available


class DuplicateStepError(ConfigurationError):
    """Raised when two steps in one tree share a name"""

    def __init__(self, step_name: str):
        super().__init__(
            f"Step name '{step_name}' is used more than once in the tree",
            "Step names must be unique within a wizard",
        )
        self.step_name = step_name


class StepAttachmentError(ConfigurationError):
    """Raised when a step is attached to a second parent or to itself"""

    def __init__(self, step_name: str, reason: str):
        super().__init__(
            f"Cannot attach step '{step_name}': {reason}",
            "Every step belongs to exactly one parent; build a new Step instead of reusing one",
        )
        self.step_name = step_name
        self.reason = reason


class UnknownFlowError(ConfigurationError):
    """Raised when a flow key is not present in the flow registry"""

    def __init__(self, flow_key: str, available: Optional[List[str]] = None):
        """Initialize unknown flow error

        Args:
            flow_key: The flow key that could not be resolved
            available: Keys currently registered
        """
        message = f"Flow '{flow_key}' is not registered"
        help_text = "Register the flow with @registry.register() before building or restoring the wizard"
        if available:
            help_text += "\n\nRegistered flows:\n" + "\n".join(f"  - {key}" for key in available)
        super().__init__(message, help_text)
        self.flow_key = flow_key
        self.available = available


class StateDivergedError(WizardError):
    """Raised when persisted state no longer matches the live step tree"""

    def __init__(self, wizard_name: str, step_name: str):
        """Initialize state divergence error

        Args:
            wizard_name: Name of the wizard being restored
            step_name: Persisted current step that is missing from the tree
        """
        message = (
            f"Persisted step '{step_name}' of wizard '{wizard_name}' "
            f"does not exist in the current step tree"
        )
        help_text = (
            "The wizard definition changed since the state was saved. "
            "Reset the persisted state for this wizard"
        )
        super().__init__(message, help_text)
        self.wizard_name = wizard_name
        self.step_name = step_name


class SerializationError(WizardError):
    """Raised when a serialized wizard payload is malformed"""


class DefinitionError(WizardError):
    """Raised when a wizard definition file cannot be parsed or validated"""

    def __init__(self, message: str, line_number: Optional[int] = None, help_text: Optional[str] = None):
        self.line_number = line_number
        if line_number:
            message = f"{message} (line {line_number})"
        super().__init__(message, help_text)
