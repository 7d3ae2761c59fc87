"""Result types returned by validation and navigation"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, TYPE_CHECKING

from .errors import ErrorBag

if TYPE_CHECKING:
    from ..core.step import Step


@dataclass
class GatewayResult:
    """Result from a validation gateway

    Errors are keyed by field path relative to the validated step.
    """
    ok: bool
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def success(cls) -> "GatewayResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, errors: Dict[str, List[str]]) -> "GatewayResult":
        return cls(ok=False, errors=errors)


@dataclass
class ValidationOutcome:
    """Result of validating one step, errors prefixed with the step name"""
    step_name: str
    errors: ErrorBag = field(default_factory=ErrorBag)

    @property
    def ok(self) -> bool:
        return self.errors.is_empty()

    def __bool__(self) -> bool:
        return self.ok


class NavigationStatus(str, Enum):
    """Outcome of Wizard.next()"""
    ADVANCED = "advanced"
    INVALID = "invalid"  # validation failed, position unchanged
    COMPLETE = "complete"  # terminal step, no further step


@dataclass
class NavigationOutcome:
    """What happened when the wizard was asked to advance"""
    status: NavigationStatus
    step: "Step"
    previous: Optional["Step"] = None
    errors: Optional[ErrorBag] = None

    @property
    def moved(self) -> bool:
        return self.status is NavigationStatus.ADVANCED

    @property
    def completed(self) -> bool:
        return self.status is NavigationStatus.COMPLETE

    @property
    def failed(self) -> bool:
        return self.status is NavigationStatus.INVALID

    def to_dict(self) -> Dict[str, object]:
        return {
            "status": self.status.value,
            "step": self.step.name,
            "previous": self.previous.name if self.previous else None,
            "errors": self.errors.to_dict() if self.errors else {},
        }
