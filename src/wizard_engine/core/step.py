"""Step: a node of the wizard's navigable tree"""
import logging
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from ..exceptions import AmbiguousFlowError, FlowMatchError, StepAttachmentError
from ..models.errors import ErrorBag
from ..models.results import ValidationOutcome
from ..models.rules import FieldRules, RuleSpec, coerce_rules
from ..utils.data import flatten
from .flows import Flow, FlowRegistry, default_registry, flow_key_for

logger = logging.getLogger(__name__)


class Step:
    """One unit of a multi-step form

    A step owns its children; ``parent`` is a plain back reference assigned
    when the step is attached. Validation errors are never kept on the failing
    step: they are handed up to the root so there is one place to read them.

    Example:
        Step.make("account").set_rules({"email": "required|string"}).set_children([
            Step.make("profile"),
        ])
    """

    def __init__(
        self,
        name: str,
        label: Optional[str] = None,
        view: Optional[str] = None,
        rules: Optional[Mapping[str, RuleSpec]] = None,
        flow: Optional[Union[str, Flow]] = None,
        children: Optional[Sequence["Step"]] = None,
        flows: Optional[FlowRegistry] = None,
    ):
        if not name or "." in name:
            raise StepAttachmentError(name or "<empty>", "step names must be non-empty and contain no '.'")

        self._name = name
        self._label = label
        self._view = view
        self._flows = flows if flows is not None else default_registry
        self._rules: Dict[str, FieldRules] = {}
        self._flow_key: Optional[str] = None
        self._flow_fn: Optional[Flow] = None
        self._parent: Optional["Step"] = None
        self._children: List["Step"] = []
        self._errors: Optional[ErrorBag] = None

        if rules:
            self.set_rules(rules)
        if flow is not None:
            self.set_flow(flow)
        if children:
            self.set_children(children)

    @classmethod
    def make(cls, name: str, flows: Optional[FlowRegistry] = None) -> "Step":
        """Create a new step instance"""
        return cls(name, flows=flows)

    @classmethod
    def restore(
        cls,
        name: str,
        label: Optional[str],
        view: Optional[str],
        rules: Mapping[str, FieldRules],
        flow: Optional[str],
        children: Sequence["Step"],
        flows: Optional[FlowRegistry] = None,
    ) -> "Step":
        """Rebuild a step from its persisted fields

        Parent links of children are re-attached here. The flow key is
        resolved eagerly so a missing registration fails at restore time.
        """
        step = cls(name, label=label, view=view, rules=rules, flows=flows)
        if flow is not None:
            step._flows.get(flow)
            step._flow_key = flow
        step.set_children(children)
        return step

    # ---- fluent configuration ------------------------------------------------

    def set_label(self, label: str) -> "Step":
        self._label = label
        return self

    def set_view(self, view: str) -> "Step":
        self._view = view
        return self

    def set_rules(self, rules: Mapping[str, RuleSpec]) -> "Step":
        """Set the validation rules for this step's fields

        Keys are field paths relative to the step's data section; errors are
        reported as ``<step>.<field>``.
        """
        self._rules = {field: coerce_rules(spec, f"{self._name}.{field}") for field, spec in rules.items()}
        return self

    def set_flow(self, flow: Union[str, Flow], name: Optional[str] = None) -> "Step":
        """Attach the flow deciding which child comes next

        Args:
            flow: Registered flow key or a flow callable
            name: Registry key for a callable (required for lambdas)

        The callable is called once per child; it must only evaluate:

            step.set_flow(
                lambda current, data, candidate: candidate.is_("business")
                    == (data.get("type.kind") == "business"),
                name="account_kind",
            )
        """
        if isinstance(flow, str):
            self._flow_key = flow
            self._flow_fn = None
        else:
            self._flow_key = self._flows.add(name or flow_key_for(flow), flow)
            self._flow_fn = flow
        return self

    def set_children(self, children: Sequence["Step"]) -> "Step":
        """Replace the children of this step, assigning their parent link"""
        seen = set()
        for child in children:
            self._check_attachable(child)
            if id(child) in seen:
                raise StepAttachmentError(child.name, f"listed twice under '{self._name}'")
            seen.add(id(child))

        for child in self._children:
            child._parent = None

        self._children = list(children)
        for child in self._children:
            child._parent = self
        return self

    def add_child(self, child: "Step") -> "Step":
        """Append a single child"""
        self._check_attachable(child)
        if child._parent is self:
            raise StepAttachmentError(child.name, f"already a child of '{self._name}'")
        child._parent = self
        self._children.append(child)
        return self

    def bind_flows(self, registry: FlowRegistry) -> "Step":
        """Resolve flows of this subtree through registry"""
        for step in self.iter_steps():
            step._flows = registry
            if step._flow_fn is not None:
                registry.add(step._flow_key, step._flow_fn)
        return self

    def _check_attachable(self, child: "Step") -> None:
        if not isinstance(child, Step):
            raise StepAttachmentError(str(child), "children must be Step instances")
        if child._parent is not None and child._parent is not self:
            raise StepAttachmentError(child.name, f"already attached to '{child._parent.name}'")
        node: Optional[Step] = self
        while node is not None:
            if node is child:
                raise StepAttachmentError(child.name, "would create a cycle")
            node = node._parent

    # ---- accessors -----------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> Optional[str]:
        return self._label

    @property
    def view(self) -> str:
        """Template reference, defaults to the step name"""
        return self._view or self._name

    @property
    def raw_view(self) -> Optional[str]:
        return self._view

    @property
    def parent(self) -> Optional["Step"]:
        return self._parent

    @property
    def children(self) -> List["Step"]:
        return list(self._children)

    @property
    def rules(self) -> Dict[str, FieldRules]:
        return dict(self._rules)

    @property
    def fields(self) -> List[str]:
        """Fields governed by this step"""
        return list(self._rules.keys())

    @property
    def flow_key(self) -> Optional[str]:
        return self._flow_key

    @property
    def flows(self) -> FlowRegistry:
        return self._flows

    @property
    def errors(self) -> Optional[ErrorBag]:
        return self._errors

    def prefixed_rules(self) -> Dict[str, FieldRules]:
        """Rules keyed by ``<step>.<field>``"""
        return {f"{self._name}.{field}": rules for field, rules in self._rules.items()}

    def get_flow(self) -> Optional[Flow]:
        """The flow callable, resolved through the registry when only the key is known"""
        if self._flow_key is None:
            return None
        if self._flow_fn is not None:
            return self._flow_fn
        return self._flows.get(self._flow_key)

    def is_(self, name: str) -> bool:
        return self._name == name

    def is_first(self) -> bool:
        return self._parent is None

    def is_last(self) -> bool:
        return not self._children

    def has_errors(self) -> bool:
        return self._errors is not None and not self._errors.is_empty()

    def get_root(self) -> "Step":
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    def iter_steps(self) -> Iterator["Step"]:
        """Depth-first pre-order traversal of this subtree"""
        yield self
        for child in self._children:
            yield from child.iter_steps()

    def find(self, name: str) -> Optional["Step"]:
        """Depth-first search of this subtree by name"""
        if self._name == name:
            return self
        for child in self._children:
            found = child.find(name)
            if found is not None:
                return found
        return None

    # ---- behaviour -----------------------------------------------------------

    def validate(self, data: Mapping[str, Any], gateway=None) -> ValidationOutcome:
        """Validate this step's section of the wizard data

        Args:
            data: The complete (nested) wizard data, keyed by step name
            gateway: ValidationGateway, defaults to RulesGateway

        Returns:
            ValidationOutcome; failures are also propagated to the root
        """
        if gateway is None:
            from ..validation.gateway import RulesGateway
            gateway = RulesGateway()

        section = data.get(self._name)
        if not isinstance(section, Mapping):
            section = {}

        errors = ErrorBag()
        if self._rules:
            result = gateway.validate(section, self._rules)
            if not result.ok:
                for field, messages in result.errors.items():
                    for message in messages:
                        errors.add(f"{self._name}.{field}", message)

        if errors.is_empty():
            self._propagate_errors(None)
        else:
            logger.debug("Step '%s' failed validation: %s", self._name, errors.keys())
            self._propagate_errors(errors)

        return ValidationOutcome(step_name=self._name, errors=errors)

    def _propagate_errors(self, errors: Optional[ErrorBag]) -> None:
        """Hand the error bag up to the root, the only step that stores it"""
        if self._parent is None:
            self._errors = errors
            return

        self._parent._propagate_errors(errors)

    def clear_errors(self) -> None:
        self._propagate_errors(None)

    def resolve_next(self, data: Mapping[str, Any]) -> Optional["Step"]:
        """Pick the step that follows this one

        Args:
            data: The complete (nested) wizard data

        Returns:
            The next step, or None when this step is terminal

        Raises:
            AmbiguousFlowError: Several children and no flow
            FlowMatchError: The flow matched zero or several children
            UnknownFlowError: The flow key is not registered
        """
        if not self._children:
            return None

        if self._flow_key is None:
            if len(self._children) == 1:
                return self._children[0]
            raise AmbiguousFlowError(self._name, [child.name for child in self._children])

        flow = self.get_flow()
        flat = MappingProxyType(flatten(data))
        matches = [child for child in self._children if flow(self, flat, child)]

        if len(matches) != 1:
            raise FlowMatchError(self._name, self._flow_key, [child.name for child in matches])

        logger.debug("Flow '%s' on '%s' selected '%s'", self._flow_key, self._name, matches[0].name)
        return matches[0]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize this subtree to plain JSON types"""
        return {
            "name": self._name,
            "label": self._label,
            "view": self._view,
            "rules": {field: rules.to_dict() for field, rules in self._rules.items()},
            "flow": self._flow_key,
            "children": [child.to_dict() for child in self._children],
        }

    def __repr__(self) -> str:
        return f"Step({self._name!r}, children={[child.name for child in self._children]!r})"
