"""
Custom exceptions for the process foundry.

Every error message names the instance, container or action involved, since
these messages are the only diagnostics a routing chain produces.
"""

from typing import Optional


class BaseFoundryError(Exception):
    """Base exception class for foundry errors."""

    recoverable = False


class FoundryDomainError(BaseFoundryError):
    """A failure of the routed operation itself rather than a decoding bug."""

    pass


class NotFoundError(FoundryDomainError):
    """Exception raised when a query matched nothing."""

    recoverable = True


class MultipleMatchesError(FoundryDomainError):
    """Exception raised when a query matched more than one item but exactly one was required."""

    recoverable = True


class NotConfiguredError(FoundryDomainError):
    """Exception raised when a required parent, shell or access path has not been set up."""

    pass


class ConfigurationError(FoundryDomainError):
    """Exception raised for missing or invalid configuration."""

    pass


class DuplicateKeyError(FoundryDomainError):
    """Exception raised when a registry key is already in use."""

    pass


class UnhandledError(FoundryDomainError):
    """Exception raised for a downstream failure the foundry does not classify further."""

    pass


class RemoteError(UnhandledError):
    """Exception raised when a downstream process exited non-zero or could not be reached."""

    recoverable = True

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class ConversionError(BaseFoundryError):
    """Exception raised when a value cannot be decoded into the expected shape."""

    pass


class UnreachableError(BaseFoundryError):
    """Exception raised when code reached a branch that should be impossible."""

    pass
