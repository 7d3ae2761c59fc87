"""Pytest configuration and Hypothesis settings"""
import pytest
from hypothesis import settings, Verbosity

from wizard_engine.core.flows import FlowRegistry

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load default profile
settings.load_profile("default")


@pytest.fixture
def flows():
    """Isolated flow registry per test"""
    return FlowRegistry()
