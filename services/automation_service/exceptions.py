# exceptions.py - Error taxonomy for the automation service

from typing import Optional

class AutomationError(Exception):
    """Base class for all automation service errors."""

    # Set when the error terminated a stored execution
    execution_id: Optional[str] = None

class AutomationValidationError(AutomationError):
    """A workflow definition was rejected before anything was persisted."""

class NotFoundError(AutomationError):
    pass

class InactiveWorkflowError(AutomationError):
    def __init__(self, message: str = "Automation workflow is not active"):
        super().__init__(message)

class UnsupportedActionError(AutomationError):
    def __init__(self, action_type: str):
        self.action_type = action_type
        super().__init__(f"Unsupported action type: {action_type}")

class ActionExecutionError(AutomationError):
    """An action handler or its capability provider failed."""

    def __init__(self, action_type: str, message: str):
        self.action_type = action_type
        super().__init__(message)

class ExecutionStateError(AutomationError):
    """An execution was asked to leave a terminal state."""

class StoreError(AutomationError):
    """The workflow or execution store rejected a write."""
