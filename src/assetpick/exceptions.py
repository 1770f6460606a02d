"""
Custom exceptions for assetpick.

The resolution engine itself never raises: unrecognized names classify as
``unknown`` and a failing host query degrades to an unknown runtime context.
These exceptions belong to the outer surfaces (configuration loading, the
GitHub artifact supplier and the CLI).
"""


class AssetPickError(Exception):
    """
    Base exception for all assetpick errors.

    Catch this to handle every application-specific failure in one place.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(AssetPickError):
    """
    Exception raised when configuration is invalid or missing.

    This includes:
    - Unreadable configuration files
    - YAML documents that are not a mapping
    - Values of the wrong type
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the configuration file cannot be read or written."""

    pass


class ConfigValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    pass


# =============================================================================
# API Errors
# =============================================================================


class APIError(AssetPickError):
    """
    Exception raised when the artifact supplier's API misbehaves.

    Attributes:
        endpoint: The API endpoint that was accessed.
        status_code: The HTTP status code returned, if any.
    """

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        """
        Initialize the API exception.

        Args:
            message: The primary error message.
            endpoint: The API endpoint that was accessed.
            status_code: The HTTP status code returned.
            details: Optional additional context.
        """
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class AuthenticationError(APIError):
    """Exception raised when API authentication fails."""

    pass


class ResourceNotFoundError(APIError):
    """Exception raised when a repository or release does not exist."""

    pass


class NetworkError(APIError):
    """
    Exception raised for transport-level failures.

    This includes connection timeouts, DNS failures and TLS errors.
    """

    pass


class RateLimitError(APIError):
    """
    Exception raised when the GitHub API rate limit is exceeded.

    Attributes:
        reset_time: When the rate limit resets (Unix timestamp).
        remaining: Number of requests remaining.
    """

    def __init__(
        self,
        message: str = "GitHub API rate limit exceeded",
        reset_time: int | None = None,
        remaining: int = 0,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(
            message,
            endpoint=endpoint,
            status_code=403,
            details=f"Resets at: {reset_time}, Remaining: {remaining}",
        )
        self.reset_time = reset_time
        self.remaining = remaining


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(AssetPickError):
    """
    Exception raised when user input fails validation.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class RepositoryReferenceError(ValidationError):
    """Exception raised when a repository reference cannot be parsed."""

    pass
