"""Domain-specific exceptions — framework-independent."""


class ValidationError(Exception):
    """Raised when a required intake field is missing or empty."""

    def __init__(self, message: str, fields: list[str] | None = None):
        self.message = message
        self.fields = fields or []
        super().__init__(message)


class UnauthorizedError(Exception):
    """Raised when the shared intake secret does not match."""

    def __init__(self, message: str = "Unauthorized"):
        self.message = message
        super().__init__(message)


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class StoreWriteError(IOError):
    """Raised when the durable record store cannot be written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not write record store '{path}': {reason}")


class UpstreamError(Exception):
    """Raised when an optional enrichment API (e.g. avatars) fails."""

    def __init__(self, service: str, message: str):
        self.service = service
        self.message = message
        super().__init__(f"[{service}] {message}")


class ChatPlatformError(Exception):
    """Raised when the chat platform returns an error.

    Carries the HTTP status code so callers can log it; intake turns it
    into a 500, identity submissions into an ephemeral failure message.
    """

    def __init__(self, platform: str, status_code: int, message: str):
        self.platform = platform
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{platform}] {status_code}: {message}")
