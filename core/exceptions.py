"""Custom exceptions for Ghost apps."""


class AppError(Exception):
    """Base class for all app errors."""
    pass


class ConfigurationError(AppError):
    """Raised when an app's filter mapping points at a missing or unusable method."""

    def __init__(self, message: str, hook_name: str | None = None, method_name: object = None):
        super().__init__(message)
        self.hook_name = hook_name
        self.method_name = method_name


class HostContractError(AppError):
    """Raised when the host app does not expose a usable filter registry."""
    pass


class ConfigError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class AppLoadError(AppError):
    """Raised when an app module cannot be loaded."""
    pass
