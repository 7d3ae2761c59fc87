"""Wizard: stateful controller over a step tree"""
import copy
import logging
from typing import Any, Dict, List, Mapping, Optional

from ..exceptions import ConfigurationError, DuplicateStepError, StateDivergedError, StepAttachmentError, StepNotFoundError
from ..models.errors import ErrorBag
from ..models.results import NavigationOutcome, NavigationStatus
from ..services.session_state_service import WizardStateService
from ..utils.data import deep_merge, flatten
from ..validation.gateway import RulesGateway, ValidationGateway
from .flows import FlowRegistry
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

logger = logging.getLogger(__name__)


class Wizard:
    """Tracks the position in a step tree and the data submitted so far

    The current step is held by name and looked up in the tree on every read,
    so a tree rebuilt for a new request never leaves a dangling reference.
    When a state service is attached, ``current`` and ``data`` are persisted on
    every mutation and restored by ``boot()``.
    """

    def __init__(
        self,
        name: str,
        root: Optional[Step] = None,
        current: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
        directory: Optional[str] = None,
        gateway: Optional[ValidationGateway] = None,
        state: Optional[WizardStateService] = None,
        flows: Optional[FlowRegistry] = None,
    ):
        """Initialize wizard

        Args:
            name: Wizard identifier, used as persistence namespace
            root: Root step of the tree
            current: Name of the active step (None means root)
            data: Initial data keyed by step name
            directory: Base directory for step views
            gateway: Validation gateway, defaults to RulesGateway
            state: Optional state service for persistence
            flows: Registry the tree's flow keys resolve through
        """
        if not name:
            raise ConfigurationError("Wizard name must not be empty")

        self.name = name
        self._root: Optional[Step] = None
        self._current = current
        self._data: Dict[str, Any] = copy.deepcopy(dict(data or {}))
        self._directory = directory
        self._gateway = gateway if gateway is not None else RulesGateway()
        self._state = state
        self._flows = flows
        self._observers: List[WizardObserver] = []

        if root is not None:
            self.set_root(root)

    @classmethod
    def make(cls, name: str, data: Optional[Mapping[str, Any]] = None) -> "Wizard":
        """Create a new wizard instance"""
        return cls(name, data=data)

    # ---- configuration -------------------------------------------------------

    def set_root(self, root: Step) -> "Wizard":
        """Attach the step tree

        Raises:
            StepAttachmentError: If root already has a parent
            DuplicateStepError: If two steps share a name
        """
        if root.parent is not None:
            raise StepAttachmentError(root.name, f"root step has parent '{root.parent.name}'")

        seen = set()
        for step in root.iter_steps():
            if step.name in seen:
                raise DuplicateStepError(step.name)
            seen.add(step.name)

        if self._flows is not None:
            root.bind_flows(self._flows)

        self._root = root
        return self

    def set_directory(self, directory: str) -> "Wizard":
        self._directory = directory
        return self

    def use_state(self, state: WizardStateService) -> "Wizard":
        self._state = state
        return self

    def register_observer(self, observer: WizardObserver) -> None:
        """Register observer for wizard events"""
        if observer not in self._observers:
            self._observers.append(observer)

    def deregister_observer(self, observer: WizardObserver) -> None:
        """Deregister observer from wizard events"""
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify_observers(self, notification: WizardNotification) -> None:
        for observer in self._observers:
            observer.receive_notification(notification)

    # ---- accessors -----------------------------------------------------------

    @property
    def root(self) -> Step:
        """The root step

        Raises:
            ConfigurationError: If no root has been attached
        """
        if self._root is None:
            raise ConfigurationError(
                f"Wizard '{self.name}' has no root step",
                "Attach a step tree with Wizard.set_root() before navigating"
            )
        return self._root

    @property
    def current_name(self) -> Optional[str]:
        return self._current

    @property
    def directory(self) -> Optional[str]:
        return self._directory

    @property
    def gateway(self) -> ValidationGateway:
        return self._gateway

    @property
    def state(self) -> Optional[WizardStateService]:
        return self._state

    def get_current(self) -> Step:
        """Resolve the current step, the root when none is set

        Raises:
            StepNotFoundError: If the current name is not in the tree
        """
        if self._current is None:
            return self.root
        return self.find_by_name(self._current)

    def find_by_name(self, name: str) -> Step:
        """Depth-first lookup of a step

        Raises:
            StepNotFoundError: If no step has this name
        """
        step = self.root.find(name)
        if step is None:
            raise StepNotFoundError(name, self.get_all_step_names())
        return step

    def get_all_steps(self) -> List[Step]:
        """All steps in depth-first pre-order, root first"""
        return list(self.root.iter_steps())

    def get_all_step_names(self) -> List[str]:
        return [step.name for step in self.get_all_steps()]

    def has_step(self, name: str) -> bool:
        return self.root.find(name) is not None

    def is_first_step(self) -> bool:
        return self.get_current().is_first()

    def is_last_step(self) -> bool:
        return self.get_current().is_last()

    def has_errors(self) -> bool:
        return self.root.has_errors()

    def get_errors(self) -> ErrorBag:
        return self.root.errors or ErrorBag()

    def view_for(self, step: Optional[Step] = None) -> str:
        """Template reference of a step (default: current) inside the view directory"""
        step = step or self.get_current()
        if self._directory:
            return f"{self._directory}.{step.view}"
        return step.view

    # ---- data ----------------------------------------------------------------

    def get_data(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def get_flat_data(self) -> Dict[str, Any]:
        """Data as dot-path keyed leaves"""
        return flatten(self._data)

    def get_step_data(self, name: str) -> Dict[str, Any]:
        section = self._data.get(name)
        return copy.deepcopy(section) if isinstance(section, dict) else {}

    def set_data(self, partial: Mapping[str, Any]) -> "Wizard":
        """Deep merge submitted values into the wizard data

        Does not validate or navigate.
        """
        self._data = deep_merge(self._data, partial)
        self._persist_data()
        return self

    def update_step_data(self, name: str, values: Mapping[str, Any]) -> "Wizard":
        """Merge values into the data section of one step"""
        return self.set_data({name: dict(values)})

    # ---- navigation ----------------------------------------------------------

    def next(self) -> NavigationOutcome:
        """Validate the current step and advance to its successor

        Returns:
            NavigationOutcome: ADVANCED with the new step, INVALID with the
            errors (also on the root), or COMPLETE when the current step is
            terminal. Only ADVANCED moves the current step.

        Raises:
            ConfigurationError: If the successor cannot be determined
        """
        current = self.get_current()
        outcome = current.validate(self._data, self._gateway)

        if not outcome.ok:
            self._notify_observers(
                StepValidationFailed(self.name, current.name, outcome.errors.to_dict())
            )
            return NavigationOutcome(NavigationStatus.INVALID, current, errors=outcome.errors)

        following = current.resolve_next(self._data)
        if following is None:
            logger.info("Wizard '%s' completed at step '%s'", self.name, current.name)
            self._notify_observers(WizardCompleted(self.name, current.name, self.get_data()))
            return NavigationOutcome(NavigationStatus.COMPLETE, current)

        self._move(current, following, StepChangeReason.NEXT)
        return NavigationOutcome(NavigationStatus.ADVANCED, following, previous=current)

    def previous(self) -> bool:
        """Move to the parent of the current step, without validation

        Returns:
            Whether the current step changed
        """
        current = self.get_current()
        parent = current.parent
        if parent is None:
            return False

        self._move(current, parent, StepChangeReason.PREVIOUS)
        return True

    def go_to(self, name: str) -> Step:
        """Jump directly to a step by name, without validation

        Raises:
            StepNotFoundError: If no step has this name
        """
        target = self.find_by_name(name)
        self._move(self.get_current(), target, StepChangeReason.JUMP)
        return target

    def reset(self) -> "Wizard":
        """Return to the root and discard data and errors"""
        previous = self._current
        self._current = None
        self._data = {}
        self.root.clear_errors()
        self._persist_current()
        self._persist_data()
        self._notify_observers(StepEntered(self.name, self.root.name, previous, StepChangeReason.RESET))
        return self

    def _move(self, source: Step, target: Step, reason: StepChangeReason) -> None:
        self._current = target.name
        self._persist_current()
        logger.debug("Wizard '%s' moved %s -> %s (%s)", self.name, source.name, target.name, reason.value)
        self._notify_observers(StepEntered(self.name, target.name, source.name, reason))

    # ---- persistence ---------------------------------------------------------

    def boot(self) -> "Wizard":
        """Restore current step and data from the attached state service

        Raises:
            StateDivergedError: If the persisted step is not in the tree
        """
        if self._state is None:
            return self

        data = self._state.load_data(self.name)
        current = self._state.load_current(self.name)
        return self.restore_state(current, data if data is not None else self._data)

    def restore_state(
        self,
        current: Optional[str],
        data: Mapping[str, Any],
        persist: bool = False,
    ) -> "Wizard":
        """Replace current step and data with previously saved values

        Args:
            current: Saved current step name (None means root)
            data: Saved wizard data
            persist: Write the restored values to the state service

        Raises:
            StateDivergedError: If current is not in the tree
        """
        if current is not None and not self.has_step(current):
            raise StateDivergedError(self.name, current)

        self._current = current
        self._data = copy.deepcopy(dict(data))
        if persist:
            self._persist_current()
            self._persist_data()

        restored = self.get_current()
        logger.debug("Wizard '%s' restored at step '%s'", self.name, restored.name)
        self._notify_observers(StateRestored(self.name, restored.name, len(self.get_flat_data())))
        return self

    def _persist_current(self) -> None:
        if self._state is not None:
            self._state.save_current(self.name, self._current)

    def _persist_data(self) -> None:
        if self._state is not None:
            self._state.save_data(self.name, self._data)

    # ---- diagnostics ---------------------------------------------------------

    def check(self) -> List[str]:
        """Find tree problems that would fail navigation later

        Returns:
            Human-readable problems, empty when the tree is sound
        """
        problems: List[str] = []
        for step in self.get_all_steps():
            if len(step.children) > 1 and step.flow_key is None:
                problems.append(
                    f"Step '{step.name}' has {len(step.children)} children but no flow"
                )
            if step.flow_key is not None and step.flow_key not in step.flows:
                problems.append(f"Step '{step.name}' uses unregistered flow '{step.flow_key}'")
        return problems

    def __repr__(self) -> str:
        return f"Wizard({self.name!r}, current={self._current!r})"
