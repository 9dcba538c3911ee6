"""
Exception types for Script Runner.
"""
from typing import Optional


VALIDATION_ERROR_MESSAGE = "Script parameter is missing or empty in request body"


class ScriptRunnerError(Exception):
    """Base exception for Script Runner errors"""
    pass


class ConfigError(ScriptRunnerError):
    """Invalid configuration value"""
    pass


class ScriptValidationError(ScriptRunnerError):
    """Request did not carry a usable script"""
    def __init__(self, message: str = VALIDATION_ERROR_MESSAGE):
        super().__init__(message)


class BrowserConnectionError(ScriptRunnerError):
    """A browser session could not be launched or attached"""
    def __init__(self, message: str, mode: str, endpoint: Optional[str] = None, cause: Optional[BaseException] = None):
        self.mode = mode
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(message)
