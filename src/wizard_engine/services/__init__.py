"""Services for wizard engine"""

from .session_state_service import WizardStateService

__all__ = ["WizardStateService"]
