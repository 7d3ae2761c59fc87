"""Validation rules for step fields"""
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..exceptions import ConfigurationError

FieldType = Literal["string", "integer", "number", "boolean", "choice"]

_TYPE_ALIASES = {
    "string": "string",
    "str": "string",
    "integer": "integer",
    "int": "integer",
    "numeric": "number",
    "number": "number",
    "float": "number",
    "boolean": "boolean",
    "bool": "boolean",
    "choice": "choice",
}


class FieldRules(BaseModel):
    """Validation rules for a single field of a step"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    required: bool = Field(False, description="Whether a non-empty value must be present")
    type: Optional[FieldType] = Field(None, description="Expected value type")
    regex: Optional[str] = Field(None, description="Regex pattern for string validation")
    min_value: Optional[Union[int, float]] = Field(None, description="Minimum value for numeric validation")
    max_value: Optional[Union[int, float]] = Field(None, description="Maximum value for numeric validation")
    min_length: Optional[int] = Field(None, description="Minimum length for string validation")
    max_length: Optional[int] = Field(None, description="Maximum length for string validation")
    choices: Optional[List[str]] = Field(None, description="Valid choices for choice validation")

    @model_validator(mode="after")
    def check_bounds(self) -> "FieldRules":
        """Reject inverted ranges"""
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValueError(f"min_value {self.min_value} is greater than max_value {self.max_value}")
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise ValueError(f"min_length {self.min_length} is greater than max_length {self.max_length}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serialize rules, omitting unset entries"""
        return self.model_dump(exclude_defaults=True)

    @classmethod
    def from_shorthand(cls, rules: Union[str, Sequence[str]]) -> "FieldRules":
        """Parse pipe separated rules such as ``"required|string|min:3|max:40"``

        ``min``/``max`` bound the value for integer and number fields and the
        length otherwise. ``in:a,b`` lists choices. Pass a list of tokens when a
        regex contains a pipe character.
        """
        tokens = rules.split("|") if isinstance(rules, str) else list(rules)
        values: Dict[str, Any] = {}
        bounds: Dict[str, str] = {}

        for token in (t.strip() for t in tokens):
            if not token:
                continue
            name, _, argument = token.partition(":")
            name = name.strip().lower()

            if name == "required":
                values["required"] = True
            elif name in _TYPE_ALIASES:
                values["type"] = _TYPE_ALIASES[name]
            elif name in ("min", "max"):
                bounds[name] = argument
            elif name == "in":
                values["choices"] = [choice.strip() for choice in argument.split(",") if choice.strip()]
            elif name == "regex":
                values["regex"] = argument
            else:
                raise ValueError(f"Unknown rule '{token}'")

        numeric = values.get("type") in ("integer", "number")
        for name, argument in bounds.items():
            try:
                bound = float(argument) if "." in argument else int(argument)
            except ValueError:
                raise ValueError(f"Rule '{name}' expects a number, got '{argument}'")
            if numeric:
                values[f"{name}_value"] = bound
            else:
                values[f"{name}_length"] = int(bound)

        return cls(**values)


RuleSpec = Union[FieldRules, str, Sequence[str], Mapping[str, Any]]


def coerce_rules(spec: RuleSpec, field: str = "") -> FieldRules:
    """Normalize a rule specification into FieldRules

    Args:
        spec: FieldRules, shorthand string, list of shorthand tokens or mapping
        field: Field name used in error messages

    Returns:
        FieldRules instance

    Raises:
        ConfigurationError: If the specification is invalid
    """
    try:
        if isinstance(spec, FieldRules):
            return spec
        if isinstance(spec, Mapping):
            return FieldRules(**spec)
        if isinstance(spec, (str, list, tuple)):
            return FieldRules.from_shorthand(spec)
    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid rules for field '{field}': {e}") from e

    raise ConfigurationError(
        f"Invalid rules for field '{field}': expected str, list, mapping or FieldRules, "
        f"got {type(spec).__name__}"
    )
