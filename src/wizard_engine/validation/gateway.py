"""Validation gateway contract and the default rules-based gateway"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping

from ..models.results import GatewayResult
from ..models.rules import FieldRules
from ..utils.data import MISSING, get_path
from .validators import ValidatorFactory, is_empty

logger = logging.getLogger(__name__)


class ValidationGateway(ABC):
    """Validates the data scoped to one step

    The engine owns rule scoping and error propagation; a gateway only decides
    whether values satisfy rules.
    """

    @abstractmethod
    def validate(self, data: Mapping[str, Any], rules: Mapping[str, FieldRules]) -> GatewayResult:
        """Validate a step's data subset

        Args:
            data: The step's portion of the wizard data
            rules: Rules keyed by field path relative to the step

        Returns:
            GatewayResult with errors keyed by the same relative field paths
        """
        pass


class RulesGateway(ValidationGateway):
    """Default gateway evaluating FieldRules with the built-in validators"""

    def validate(self, data: Mapping[str, Any], rules: Mapping[str, FieldRules]) -> GatewayResult:
        errors: Dict[str, List[str]] = {}

        for field, field_rules in rules.items():
            value = get_path(data, field, MISSING)

            if value is MISSING or is_empty(value):
                if field_rules.required:
                    errors.setdefault(field, []).append(f"The {field} field is required")
                continue

            validator = ValidatorFactory.create_validator(field_rules)
            result = validator.validate(value, field)
            if not result.is_valid:
                errors.setdefault(field, []).append(result.error_message)

        if errors:
            logger.debug("Validation failed for fields: %s", ", ".join(errors))
            return GatewayResult.failure(errors)

        return GatewayResult.success()
