"""Flow registry for conditional step transitions

A flow decides which child of a step comes next. It is called once per
candidate child with ``(current, data, candidate)`` where ``data`` is the
flattened, read-only wizard data, and must return True for exactly one child.
Flows must only evaluate; they may be called any number of times.

Flows are persisted by key, never as code: the same registry (populated at
import time) resolves the key again when a wizard is restored.
"""
import importlib
import logging
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, TYPE_CHECKING

from ..exceptions import ConfigurationError, UnknownFlowError

if TYPE_CHECKING:
    from .step import Step

logger = logging.getLogger(__name__)

Flow = Callable[["Step", Mapping[str, Any], "Step"], bool]

FLOW_NAME_ATTR = "__wizard_flow__"


def flow_key_for(fn: Callable[..., Any]) -> str:
    """Derive the registry key of a callable

    Functions registered through a registry carry their key; other named
    functions use ``module.qualname``. Lambdas have no stable name.

    Raises:
        ConfigurationError: If fn is a lambda or local function without a key
    """
    key = getattr(fn, FLOW_NAME_ATTR, None)
    if key:
        return key

    qualname = getattr(fn, "__qualname__", "")
    if not qualname or "<lambda>" in qualname or "<locals>" in qualname:
        raise ConfigurationError(
            f"Flow {fn!r} has no stable name",
            "Pass an explicit name: step.set_flow(fn, name='my_flow'), or register it with @flows.register('my_flow')"
        )
    return f"{fn.__module__}.{qualname}"


class FlowRegistry:
    """Registry mapping flow keys to flow callables"""

    def __init__(self):
        self._flows: Dict[str, Flow] = {}

    def register(self, name: Optional[str] = None) -> Callable[[Flow], Flow]:
        """Decorator registering a flow under name (default ``module.qualname``)

        Example:
            @flows.register("account_kind")
            def account_kind(current, data, candidate):
                return candidate.is_(data.get("type.kind"))
        """
        def decorator(fn: Flow) -> Flow:
            self.add(name or flow_key_for(fn), fn)
            return fn

        return decorator

    def add(self, name: str, fn: Flow) -> str:
        """Register fn under name, replacing any previous flow with that key

        Step trees are rebuilt on every request, so re-registering a key is
        expected and simply rebinds it.

        Returns:
            The registry key
        """
        if not callable(fn):
            raise ConfigurationError(f"Flow '{name}' is not callable")

        previous = self._flows.get(name)
        if previous is not None and previous is not fn:
            logger.debug("Rebinding flow '%s'", name)

        self._flows[name] = fn
        try:
            setattr(fn, FLOW_NAME_ATTR, name)
        except (AttributeError, TypeError):
            # bound methods and builtins reject attributes; the key still resolves
            pass
        return name

    def get(self, name: str) -> Flow:
        """Resolve a flow key

        Raises:
            UnknownFlowError: If name is not registered
        """
        if name not in self._flows:
            raise UnknownFlowError(name, self.list_flows())
        return self._flows[name]

    def remove(self, name: str) -> None:
        self._flows.pop(name, None)

    def list_flows(self) -> List[str]:
        return sorted(self._flows.keys())

    def load_module(self, module_path: str) -> None:
        """Import a module whose import registers flows into this registry

        Raises:
            ConfigurationError: If the module cannot be imported
        """
        try:
            importlib.import_module(module_path)
        except ImportError as e:
            raise ConfigurationError(
                f"Cannot import flow module '{module_path}': {e}",
                "Make sure the module is importable from the current environment"
            ) from e

    def __contains__(self, name: object) -> bool:
        return name in self._flows

    def __len__(self) -> int:
        return len(self._flows)


def field_switch(path: str, cases: Mapping[Any, str], default: Optional[str] = None) -> Flow:
    """Build a flow choosing the child named by the value at a data path

    Args:
        path: Flattened data path, e.g. ``"type.kind"``
        cases: Field value to child name
        default: Child name used when the value has no case

    Returns:
        Flow callable; register it under a name before attaching it
    """
    def flow(current: "Step", data: Mapping[str, Any], candidate: "Step") -> bool:
        value = data.get(path)
        # list leaves have no case
        target = cases.get(value, default) if isinstance(value, Hashable) else default
        return target is not None and candidate.is_(target)

    return flow


default_registry = FlowRegistry()
