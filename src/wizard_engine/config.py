"""Wizard engine settings loaded from YAML"""

import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .services.session_state_service import WizardStateService
from .storage.session_store import FilesystemStore, InMemoryStore, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path("wizards.yaml")


class WizardSettings(BaseModel):
    """Engine settings, e.g. ``wizards.yaml``:

        storage: filesystem
        storage_path: .wizards
        steps_directory: steps
    """

    storage: Literal["memory", "filesystem"] = Field(
        "memory",
        description="Where wizard state is persisted"
    )
    storage_path: Path = Field(Path(".wizards"), description="Directory for filesystem storage")
    steps_directory: str = Field("steps", description="Directory step views are resolved from")
    session_prefix: Optional[str] = Field(None, description="Namespace prepended to persistence keys")
    log_level: str = Field("WARNING", description="Logging level used by the CLI")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_settings(path: Optional[Path] = None) -> WizardSettings:
    """Load settings from a YAML file, defaults when it does not exist

    Args:
        path: Settings file (default: wizards.yaml in the working directory)

    Raises:
        ConfigurationError: If the file content is invalid
    """
    settings_path = Path(path) if path is not None else DEFAULT_SETTINGS_FILE

    if not settings_path.exists():
        if path is not None:
            raise ConfigurationError(f"Settings file not found: {settings_path}")
        logger.debug("No settings file at %s, using defaults", settings_path)
        return WizardSettings()

    try:
        with open(settings_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read settings file {settings_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {settings_path} must contain a mapping")

    try:
        return WizardSettings(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid settings in {settings_path}: {e}",
            "See WizardSettings for the supported keys"
        ) from e


def create_store(settings: WizardSettings) -> SessionStore:
    """Build the SessionStore selected by settings"""
    if settings.storage == "filesystem":
        return FilesystemStore(base_path=settings.storage_path)
    return InMemoryStore()


def create_state_service(settings: WizardSettings) -> WizardStateService:
    return WizardStateService(create_store(settings), prefix=settings.session_prefix)
