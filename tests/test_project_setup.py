"""Test project setup and structure"""

import importlib
from pathlib import Path


def test_package_imports():
    """Verify all core dependencies are importable"""
    importlib.import_module("typer")
    importlib.import_module("rich")
    importlib.import_module("pydantic")
    importlib.import_module("yaml")
    importlib.import_module("ruamel.yaml")


def test_directory_structure():
    """Verify project directory structure"""
    base_dir = Path(__file__).parent.parent
    package_dir = base_dir / "src" / "wizard_engine"

    assert package_dir.is_dir()
    assert (package_dir / "__init__.py").is_file()
    assert (package_dir / "core").is_dir()
    assert (package_dir / "cli.py").is_file()
    assert (base_dir / "tests" / "unit").is_dir()
    assert (base_dir / "tests" / "integration").is_dir()


def test_version_exported():
    import wizard_engine

    assert wizard_engine.__version__ == "0.1.0"
