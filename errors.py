"""
Error types raised by the cloud commands.

Only two kinds of failure exist: a flag or request field that is missing or
malformed (ValidationError), and a failed call into a cloud SDK
(ProviderError). The command layer logs either one and exits non-zero.
"""


class CloudActionsError(Exception):
    """Base class for all errors surfaced by the cloud command."""


class ValidationError(CloudActionsError):
    """A required flag is empty or a request field is invalid."""


class ProviderError(CloudActionsError):
    """A cloud provider SDK call failed."""

    def __init__(self, message: str, cause: Exception = None):
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.cause = cause


class ApplicationAlreadyExistsError(ProviderError):
    def __init__(self, display_name: str):
        super().__init__(f"application already exists: {display_name}")
        self.display_name = display_name


class ServicePrincipalAlreadyExistsError(ProviderError):
    def __init__(self, display_name: str):
        super().__init__(f"service principal already exists: {display_name}")
        self.display_name = display_name
