"""Wizard definition DSL Pydantic models"""
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .rules import FieldRules

SUPPORTED_VERSIONS = ["1.0.0"]


class StepDefinition(BaseModel):
    """Step definition, children nest recursively"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Unique step identifier")
    label: Optional[str] = Field(None, description="Display label")
    view: Optional[str] = Field(None, description="Template reference, defaults to name")
    rules: Dict[str, Union[str, List[str], FieldRules]] = Field(
        default_factory=dict,
        description="Validation rules keyed by field path"
    )
    flow: Optional[str] = Field(None, description="Registered flow key choosing the next child")
    children: List["StepDefinition"] = Field(default_factory=list, description="Ordered child steps")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Step names address data sections, dots would break flattening"""
        if "." in v:
            raise ValueError(f"Step name '{v}' must not contain '.'")
        return v

    def walk(self) -> Iterator["StepDefinition"]:
        """Pre-order traversal of this definition subtree"""
        yield self
        for child in self.children:
            yield from child.walk()


class WizardDefinition(BaseModel):
    """Complete wizard definition"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(..., description="Wizard DSL version")
    name: str = Field(..., min_length=1, description="Wizard name, used as persistence namespace")
    directory: Optional[str] = Field(None, description="View directory for step templates")
    root: StepDefinition = Field(..., description="Root step")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Free-form metadata")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate wizard DSL version"""
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"Unsupported wizard DSL version: {v}")
        return v

    @model_validator(mode="after")
    def validate_tree(self) -> "WizardDefinition":
        """Validate unique step names and unambiguous branching"""
        seen = set()
        for step in self.root.walk():
            if step.name in seen:
                raise ValueError(f"Duplicate step name '{step.name}' found in wizard")
            seen.add(step.name)

            if len(step.children) > 1 and not step.flow:
                raise ValueError(
                    f"Step '{step.name}' has {len(step.children)} children but no flow"
                )
        return self

    def step_names(self) -> List[str]:
        return [step.name for step in self.root.walk()]
