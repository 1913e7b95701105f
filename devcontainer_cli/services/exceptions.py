"""Custom exceptions for the devcontainer core."""

from typing import Optional


class DevcontainerError(Exception):
    """Base exception for all devcontainer errors."""

    pass


class ConfigurationError(DevcontainerError):
    """Exception raised when a configuration document cannot be used."""

    pass


class ProviderError(DevcontainerError):
    """Exception raised for container-engine operations.

    When the failure comes from an engine command the failing command line,
    its exit code and the captured stderr are kept on the exception.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class ProviderTimeoutError(ProviderError):
    """Exception raised when an engine command exceeds its deadline."""

    def __init__(self, message: str, command: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(message, command=command)
        self.timeout = timeout
