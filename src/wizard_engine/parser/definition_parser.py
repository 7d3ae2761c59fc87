"""Wizard definition parser with Pydantic validation and line number extraction"""
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError
from ruamel.yaml import YAML

from ..core.flows import FlowRegistry
from ..core.step import Step
from ..core.wizard import Wizard
from ..exceptions import DefinitionError
from ..models.definition import StepDefinition, WizardDefinition
from ..services.session_state_service import WizardStateService
from ..validation.gateway import ValidationGateway


class WizardDefinitionParser:
    """Parser for wizard definition YAML files with validation

    Example file:

        version: "1.0.0"
        name: signup
        root:
          name: account
          rules:
            email: required|string
          children:
            - name: profile
    """

    def __init__(self):
        self.schema_cache: Dict[str, WizardDefinition] = {}
        self._ruamel_yaml = YAML()
        self._ruamel_yaml.preserve_quotes = True

    def parse_yaml(self, yaml_path: Path) -> WizardDefinition:
        """Parse and validate a YAML wizard definition

        Args:
            yaml_path: Path to definition YAML file

        Returns:
            Validated WizardDefinition instance

        Raises:
            DefinitionError: If parsing or validation fails
        """
        yaml_path = Path(yaml_path)
        cache_key = str(yaml_path.resolve())
        if cache_key in self.schema_cache:
            return self.schema_cache[cache_key]

        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise DefinitionError(
                f"YAML parsing error: {e}",
                line_number=self._extract_yaml_error_line(e)
            )
        except FileNotFoundError:
            raise DefinitionError(f"Wizard definition not found: {yaml_path}")
        except OSError as e:
            raise DefinitionError(f"Error reading wizard definition: {e}")

        if not isinstance(data, Mapping):
            raise DefinitionError(f"Wizard definition must be a mapping: {yaml_path}")

        try:
            definition = WizardDefinition(**data)
        except ValidationError as e:
            raise DefinitionError(
                f"Invalid wizard definition: {self._format_validation_error(e)}",
                line_number=self._extract_line_number(yaml_path, e)
            )

        self.schema_cache[cache_key] = definition
        return definition

    def parse_dict(self, data: Mapping[str, Any]) -> WizardDefinition:
        """Validate an already loaded definition mapping

        Raises:
            DefinitionError: If validation fails
        """
        try:
            return WizardDefinition(**data)
        except ValidationError as e:
            raise DefinitionError(f"Invalid wizard definition: {self._format_validation_error(e)}")

    def _extract_yaml_error_line(self, error: yaml.YAMLError) -> Optional[int]:
        """Extract line number from YAML parsing error"""
        mark = getattr(error, "problem_mark", None)
        if mark is not None:
            return mark.line + 1
        return None

    def _extract_line_number(self, yaml_path: Path, error: ValidationError) -> Optional[int]:
        """Extract line number of the first invalid field using ruamel.yaml

        Args:
            yaml_path: Path to YAML file
            error: Pydantic validation error

        Returns:
            Line number if found, None otherwise
        """
        errors = error.errors()
        if not errors:
            return None

        field_path = errors[0].get("loc", ())
        if not field_path:
            return None

        try:
            with open(yaml_path) as f:
                node = self._ruamel_yaml.load(f)
        except Exception:
            # ruamel raises its own error types; line numbers are best effort
            return None

        line = getattr(getattr(node, "lc", None), "line", None)
        for field in field_path:
            if isinstance(node, Mapping) and field in node:
                line = node.lc.key(field)[0]
                node = node[field]
            elif isinstance(node, list) and isinstance(field, int) and 0 <= field < len(node):
                line = node.lc.item(field)[0]
                node = node[field]
            else:
                break

        if line is None:
            return None
        return line + 1

    def _format_validation_error(self, error: ValidationError) -> str:
        """Format Pydantic validation error for user display"""
        errors = error.errors()
        if not errors:
            return str(error)

        first_error = errors[0]
        field_path = ".".join(str(loc) for loc in first_error.get("loc", ()))
        message = first_error.get("msg", "Validation failed")

        if field_path:
            return f"{field_path}: {message}"
        return message

    def clear_cache(self) -> None:
        """Clear the schema cache"""
        self.schema_cache.clear()


def build_step(definition: StepDefinition, flows: Optional[FlowRegistry] = None) -> Step:
    """Turn a step definition subtree into live steps"""
    step = Step(
        definition.name,
        label=definition.label,
        view=definition.view,
        rules=definition.rules,
        flow=definition.flow,
        flows=flows,
    )
    step.set_children([build_step(child, flows) for child in definition.children])
    return step


def build_wizard(
    definition: WizardDefinition,
    flows: Optional[FlowRegistry] = None,
    gateway: Optional[ValidationGateway] = None,
    state: Optional[WizardStateService] = None,
    directory: Optional[str] = None,
) -> Wizard:
    """Build a Wizard from a validated definition

    Flow keys are checked lazily at navigation time; call ``Wizard.check()``
    to find unregistered flows up front.

    Args:
        definition: Validated wizard definition
        flows: Registry the definition's flow keys resolve through
        gateway: Validation gateway
        state: State service used by boot() and on every mutation
        directory: View directory used when the definition has none
    """
    return Wizard(
        definition.name,
        root=build_step(definition.root, flows),
        directory=definition.directory or directory,
        gateway=gateway,
        state=state,
        flows=flows,
    )
