"""Validation gateway and field validators"""
from .gateway import RulesGateway, ValidationGateway
from .validators import (
    BooleanValidator,
    ChoiceValidator,
    IntegerValidator,
    NumberValidator,
    StringValidator,
    UntypedValidator,
    ValidationResult,
    Validator,
    ValidatorFactory,
    is_empty,
)

__all__ = [
    "RulesGateway",
    "ValidationGateway",
    "BooleanValidator",
    "ChoiceValidator",
    "IntegerValidator",
    "NumberValidator",
    "StringValidator",
    "UntypedValidator",
    "ValidationResult",
    "Validator",
    "ValidatorFactory",
    "is_empty",
]
