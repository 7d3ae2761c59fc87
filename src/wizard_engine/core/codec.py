"""Serialization codec converting a Wizard to plain JSON types and back

The payload carries the whole step tree, so a wizard can be rebuilt without
the application's tree definition. Flows travel as registry keys; the
receiving process must have registered the same keys.
"""
import hashlib
import json
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from ..exceptions import SerializationError, StateDivergedError, StepAttachmentError
from ..models.rules import FieldRules
from ..validation.gateway import ValidationGateway
from .flows import FlowRegistry, default_registry
from .step import Step
from .wizard import Wizard

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

_WIZARD_FIELDS = ["format", "name", "current", "data", "root"]
_STEP_FIELDS = ["name", "children"]
_OPTIONAL_STRING_FIELDS = ["label", "view", "flow"]


def tree_hash(root: Step) -> str:
    """Compute SHA256 hash of a step tree's structure"""
    tree_data = json.dumps(root.to_dict(), sort_keys=True)
    return hashlib.sha256(tree_data.encode()).hexdigest()


class WizardCodec:
    """Serializes wizards, step trees included"""

    def __init__(
        self,
        flows: Optional[FlowRegistry] = None,
        gateway: Optional[ValidationGateway] = None,
    ):
        """Initialize codec

        Args:
            flows: Registry resolving flow keys on load (default registry if None)
            gateway: Validation gateway given to loaded wizards
        """
        self.flows = flows if flows is not None else default_registry
        self.gateway = gateway

    def dump(self, wizard: Wizard) -> Dict[str, Any]:
        """Serialize wizard state to JSON-compatible dict

        Returns:
            Dictionary containing name, current step, data, directory and tree
        """
        return {
            "format": FORMAT_VERSION,
            "name": wizard.name,
            "current": wizard.current_name,
            "directory": wizard.directory,
            "data": wizard.get_data(),
            "tree_hash": tree_hash(wizard.root),
            "root": wizard.root.to_dict(),
        }

    def dumps(self, wizard: Wizard) -> str:
        return json.dumps(self.dump(wizard), sort_keys=True)

    def load(self, payload: Mapping[str, Any]) -> Wizard:
        """Rebuild a wizard from a dumped payload

        Raises:
            SerializationError: If the payload schema is invalid
            UnknownFlowError: If a flow key is not registered
            StateDivergedError: If the current step is missing from the tree
        """
        self._validate_wizard_schema(payload)

        root = self._load_step(payload["root"], path="root")

        expected_hash = payload.get("tree_hash")
        if expected_hash is not None and expected_hash != tree_hash(root):
            raise SerializationError(
                f"Tree hash mismatch for wizard '{payload['name']}'",
                "The payload was modified after it was produced"
            )

        current = payload["current"]
        if current is not None and root.find(current) is None:
            raise StateDivergedError(payload["name"], current)

        return Wizard(
            payload["name"],
            root=root,
            current=current,
            data=payload["data"],
            directory=payload.get("directory"),
            gateway=self.gateway,
        )

    def loads(self, text: str) -> Wizard:
        try:
            payload = json.loads(text)
        except ValueError as e:
            raise SerializationError(f"Serialized wizard is not valid JSON: {e}") from e
        return self.load(payload)

    def restore_into(self, wizard: Wizard, payload: Mapping[str, Any]) -> Wizard:
        """Apply a dumped payload's current step and data to a freshly built wizard

        The live tree wins; a differing tree hash only warns.

        Raises:
            SerializationError: If the payload schema is invalid
            StateDivergedError: If the current step is missing from the live tree
        """
        self._validate_wizard_schema(payload)

        if payload.get("tree_hash") and payload["tree_hash"] != tree_hash(wizard.root):
            logger.warning(
                "Wizard '%s' state was saved for a different step tree", wizard.name
            )

        return wizard.restore_state(payload["current"], payload["data"], persist=True)

    def _validate_wizard_schema(self, payload: Any) -> None:
        if not isinstance(payload, Mapping):
            raise SerializationError(f"Serialized wizard must be a mapping, got {type(payload).__name__}")

        for field in _WIZARD_FIELDS:
            if field not in payload:
                raise SerializationError(f"Invalid wizard payload: missing required field '{field}'")

        if payload["format"] != FORMAT_VERSION:
            raise SerializationError(
                f"Unsupported wizard payload format {payload['format']!r}, expected {FORMAT_VERSION}"
            )
        if not isinstance(payload["data"], Mapping):
            raise SerializationError("Invalid wizard payload: 'data' must be a mapping")

    def _load_step(self, data: Any, path: str) -> Step:
        if not isinstance(data, Mapping):
            raise SerializationError(f"Invalid step at {path}: expected mapping")

        for field in _STEP_FIELDS:
            if field not in data:
                raise SerializationError(f"Invalid step at {path}: missing required field '{field}'")

        if not isinstance(data["name"], str):
            raise SerializationError(f"Invalid step at {path}: 'name' must be a string")
        for field in _OPTIONAL_STRING_FIELDS:
            if data.get(field) is not None and not isinstance(data[field], str):
                raise SerializationError(f"Invalid step at {path}: '{field}' must be a string or null")
        if data.get("rules") is not None and not isinstance(data["rules"], Mapping):
            raise SerializationError(f"Invalid step at {path}: 'rules' must be a mapping")
        if not isinstance(data["children"], list):
            raise SerializationError(f"Invalid step at {path}: 'children' must be a list")

        try:
            rules = {
                field: FieldRules(**spec)
                for field, spec in (data.get("rules") or {}).items()
            }
        except (TypeError, ValidationError) as e:
            raise SerializationError(f"Invalid rules for step '{data['name']}': {e}") from e

        children = [
            self._load_step(child, f"{path}.{index}")
            for index, child in enumerate(data["children"])
        ]

        try:
            return Step.restore(
                name=data["name"],
                label=data.get("label"),
                view=data.get("view"),
                rules=rules,
                flow=data.get("flow"),
                children=children,
                flows=self.flows,
            )
        except StepAttachmentError as e:
            raise SerializationError(f"Invalid step at {path}: {e.message}") from e
