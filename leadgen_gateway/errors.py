"""Exception taxonomy shared by the gateway, its routes and its upstream client."""


class GatewayError(Exception):
    """Base exception for this project."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ConfigError(GatewayError):
    """Raised when runtime configuration is invalid."""


class StoreError(GatewayError):
    """Raised when the shared cache / counter store cannot be reached."""


class ValidationError(GatewayError):
    status_code = 400

    def __init__(self, message: str = "Validation failed", details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = list(details or [])


class BadRequest(GatewayError):
    status_code = 400


class AuthenticationFailed(GatewayError):
    status_code = 401


class Forbidden(GatewayError):
    status_code = 403


class NotFound(GatewayError):
    status_code = 404


class RateLimitExceeded(GatewayError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamError(GatewayError):
    """Non-2xx upstream answer that has no more specific class."""

    status_code = 502

    def __init__(self, status: int, message: str = "") -> None:
        super().__init__(message or f"Upstream error ({status})")
        self.status = status


class NetworkError(GatewayError):
    """The upstream call produced no response at all."""

    status_code = 500
