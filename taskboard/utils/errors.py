"""Error types for taskboard."""


class TaskboardError(Exception):
    """Base exception for taskboard errors."""

    pass


class ValidationError(TaskboardError):
    """Raised when a field constraint is violated.

    Always raised before any request reaches the data store, so the
    caller can show the message next to the offending field.
    """

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class AuthError(TaskboardError):
    """Raised when no authenticated user is available or the store rejects the credentials."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class NotFoundError(TaskboardError):
    """Raised when a referenced entity is missing or not owned by the caller."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class FetchError(TaskboardError):
    """Raised when the transport or the data store fails."""

    pass


# Configuration errors
class ConfigurationError(TaskboardError):
    """Raised when configuration is missing or invalid."""

    pass


class MissingSettingError(ConfigurationError):
    """Raised when a setting required by the selected backend is not set."""

    def __init__(self, setting: str, backend: str):
        super().__init__(f"{setting} must be set to use the '{backend}' backend")
        self.setting = setting
        self.backend = backend


class UnsupportedBackendError(ConfigurationError):
    """Raised when the configured storage backend is unknown."""

    def __init__(self, backend: str):
        super().__init__(f"Unsupported backend: {backend}")
        self.backend = backend


class GatewayNotInitializedError(TaskboardError):
    """Raised when a gateway operation is attempted without initialization."""

    def __init__(self, component: str = "Database pool"):
        super().__init__(f"{component} not initialized. Call initialize() first")
        self.component = component
