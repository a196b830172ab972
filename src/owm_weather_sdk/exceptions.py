"""SDK exception classes."""


class WeatherSDKError(Exception):
    """Base class for every error raised by the SDK."""


class ConfigError(WeatherSDKError):
    """Raised when configuration is invalid or incomplete."""


class InvalidArgumentError(WeatherSDKError, ValueError):
    """Raised when a caller passes an empty or invalid city or API key."""


class FetchError(WeatherSDKError):
    """Raised for transport failures and non-success HTTP statuses."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "unknown",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code


class MalformedDataError(WeatherSDKError):
    """Raised when the weather API returns a structurally unexpected payload."""


class ClosedError(WeatherSDKError):
    """Raised when an SDK or scheduler is used after shutdown."""
