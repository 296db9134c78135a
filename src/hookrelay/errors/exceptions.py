"""Custom exception classes for hookrelay."""


class RelayError(Exception):
    """Base exception for request-path failures."""

    def __init__(self, code: str, message: str, status_code: int = 500):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class BadRequestError(RelayError):
    """Unreadable body or payload that is not a webhook envelope."""

    def __init__(self, message: str = "Bad request"):
        super().__init__("BAD_REQUEST", message, status_code=400)


class SignatureError(RelayError):
    """Missing or invalid webhook signature."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__("UNAUTHORIZED", message, status_code=401)


class PublishError(RelayError):
    """The message bus rejected or timed out a publish."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__("PUBLISH_FAILED", message, status_code=500)


class BusUnavailableError(RelayError):
    """The message bus did not answer a liveness ping."""

    def __init__(self, message: str = "Service unavailable"):
        super().__init__("BUS_UNAVAILABLE", message, status_code=503)


class BusError(Exception):
    """Transport-level failure talking to the message bus."""


class ConfigurationError(Exception):
    """Unusable configuration detected at startup. Fatal."""
