"""Validation classes for step field validation"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ..models.rules import FieldRules


@dataclass
class ValidationResult:
    """Result of validation operation"""
    is_valid: bool
    error_message: Optional[str] = None
    field_context: Optional[str] = None


def is_empty(value: Any) -> bool:
    """Missing, None, blank strings and empty collections count as empty"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Validator(ABC):
    """Base validator class"""

    def __init__(self, rules: Optional[FieldRules] = None):
        self.rules = rules or FieldRules()

    @abstractmethod
    def validate(self, value: Any, field_id: str) -> ValidationResult:
        """Validate a value and return result"""
        pass

    def _fail(self, message: str, field_id: str) -> ValidationResult:
        return ValidationResult(is_valid=False, error_message=message, field_context=field_id)

    def _check_string(self, value: str, field_id: str) -> ValidationResult:
        """Length and regex checks shared by string-like validators"""
        if self.rules.min_length is not None and len(value) < self.rules.min_length:
            return self._fail(
                f"Value must be at least {self.rules.min_length} characters",
                field_id
            )

        if self.rules.max_length is not None and len(value) > self.rules.max_length:
            return self._fail(
                f"Value must be at most {self.rules.max_length} characters",
                field_id
            )

        if self.rules.regex:
            try:
                pattern = re.compile(self.rules.regex)
            except re.error as e:
                return self._fail(f"Invalid regex pattern: {e}", field_id)
            if not pattern.match(value):
                return self._fail(
                    f"Value '{value}' does not match pattern '{self.rules.regex}'",
                    field_id
                )

        return ValidationResult(is_valid=True)

    def _check_range(self, value: Any, field_id: str) -> ValidationResult:
        """Numeric range checks shared by number validators"""
        if self.rules.min_value is not None and value < self.rules.min_value:
            return self._fail(f"Value {value} is below minimum {self.rules.min_value}", field_id)

        if self.rules.max_value is not None and value > self.rules.max_value:
            return self._fail(f"Value {value} exceeds maximum {self.rules.max_value}", field_id)

        return ValidationResult(is_valid=True)

    def _check_choices(self, value: Any, field_id: str) -> ValidationResult:
        if self.rules.choices and value not in self.rules.choices:
            return self._fail(
                f"Value '{value}' not in allowed choices: {', '.join(self.rules.choices)}",
                field_id
            )
        return ValidationResult(is_valid=True)


class StringValidator(Validator):
    """Validator for string fields"""

    def validate(self, value: Any, field_id: str) -> ValidationResult:
        """Validate string value with optional length and regex"""
        if not isinstance(value, str):
            return self._fail(f"Expected string, got {type(value).__name__}", field_id)

        result = self._check_string(value, field_id)
        if not result.is_valid:
            return result

        return self._check_choices(value, field_id)


class IntegerValidator(Validator):
    """Validator for integer fields"""

    def validate(self, value: Any, field_id: str) -> ValidationResult:
        """Validate integer value with optional range"""
        if not isinstance(value, int) or isinstance(value, bool):
            return self._fail(f"Expected integer, got {type(value).__name__}", field_id)

        return self._check_range(value, field_id)


class NumberValidator(Validator):
    """Validator for integer or float fields"""

    def validate(self, value: Any, field_id: str) -> ValidationResult:
        if not _is_number(value):
            return self._fail(f"Expected number, got {type(value).__name__}", field_id)

        return self._check_range(value, field_id)


class BooleanValidator(Validator):
    """Validator for boolean fields"""

    def validate(self, value: Any, field_id: str) -> ValidationResult:
        """Validate boolean value"""
        if not isinstance(value, bool):
            return self._fail(f"Expected boolean, got {type(value).__name__}", field_id)

        return ValidationResult(is_valid=True)


class ChoiceValidator(Validator):
    """Validator for choice fields"""

    def validate(self, value: Any, field_id: str) -> ValidationResult:
        """Validate choice value against allowed choices"""
        if not isinstance(value, str):
            return self._fail(f"Expected string choice, got {type(value).__name__}", field_id)

        return self._check_choices(value, field_id)


class UntypedValidator(Validator):
    """Applies whichever rules fit the runtime type of the value"""

    def validate(self, value: Any, field_id: str) -> ValidationResult:
        result = self._check_choices(value, field_id)
        if not result.is_valid:
            return result

        if isinstance(value, str):
            return self._check_string(value, field_id)

        if _is_number(value):
            return self._check_range(value, field_id)

        return ValidationResult(is_valid=True)


class ValidatorFactory:
    """Factory for creating validators based on field type"""

    @staticmethod
    def create_validator(rules: FieldRules) -> Validator:
        """Create appropriate validator for the rules' field type"""
        validators = {
            "string": StringValidator,
            "integer": IntegerValidator,
            "number": NumberValidator,
            "boolean": BooleanValidator,
            "choice": ChoiceValidator,
        }

        if rules.type is None:
            return UntypedValidator(rules)

        validator_class = validators.get(rules.type)
        if not validator_class:
            raise ValueError(f"No validator for type {rules.type}")

        return validator_class(rules)
