"""Observer pattern for wizard events"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class StepChangeReason(Enum):
    """Why the current step changed"""
    NEXT = "next"
    PREVIOUS = "previous"
    JUMP = "jump"  # direct navigation by name
    RESET = "reset"


@dataclass
class StepEntered:
    """Emitted when the current step changes"""
    wizard_name: str
    step_name: str
    previous_step_name: Optional[str]
    reason: StepChangeReason

    def to_dict(self) -> Dict[str, Any]:
        """Serialize notification to dict"""
        return {
            "type": "StepEntered",
            "wizard_name": self.wizard_name,
            "step_name": self.step_name,
            "previous_step_name": self.previous_step_name,
            "reason": self.reason.value
        }


@dataclass
class StepValidationFailed:
    """Emitted when next() is refused because the current step is invalid"""
    wizard_name: str
    step_name: str
    errors: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize notification to dict"""
        return {
            "type": "StepValidationFailed",
            "wizard_name": self.wizard_name,
            "step_name": self.step_name,
            "errors": self.errors
        }


@dataclass
class WizardCompleted:
    """Emitted when next() is called on a valid terminal step"""
    wizard_name: str
    step_name: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize notification to dict without the submitted data"""
        return {
            "type": "WizardCompleted",
            "wizard_name": self.wizard_name,
            "step_name": self.step_name
        }


@dataclass
class StateRestored:
    """Emitted when wizard state is restored from persistence"""
    wizard_name: str
    step_name: str
    field_count: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialize notification to dict"""
        return {
            "type": "StateRestored",
            "wizard_name": self.wizard_name,
            "step_name": self.step_name,
            "field_count": self.field_count
        }


WizardNotification = Union[StepEntered, StepValidationFailed, WizardCompleted, StateRestored]


class WizardObserver(ABC):
    """Abstract base class for wizard event observers

    Observers run synchronously inside the request; they must not navigate
    the wizard that notified them.
    """

    @abstractmethod
    def receive_notification(self, notification: WizardNotification) -> None:
        """Handle notification from the wizard

        Args:
            notification: Event notification
        """
        pass
