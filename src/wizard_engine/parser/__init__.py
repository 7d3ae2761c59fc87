"""Wizard definition parser"""
from .definition_parser import WizardDefinitionParser, build_step, build_wizard

__all__ = ["WizardDefinitionParser", "build_step", "build_wizard"]
