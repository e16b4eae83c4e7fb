class Proto2FetchError(Exception):
    """Base class for generator errors."""


class SchemaLoadError(Proto2FetchError):
    """A single schema file could not be loaded or compiled."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")


class ConfigError(Proto2FetchError):
    """Invalid generator configuration."""


class MethodNameCollisionError(Proto2FetchError):
    """Two services define conflicting methods that map to the same client method name."""

    def __init__(self, method_name: str, first_service: str, second_service: str) -> None:
        self.method_name = method_name
        self.first_service = first_service
        self.second_service = second_service
        super().__init__(
            f"Method '{method_name}' is defined differently by services "
            f"'{first_service}' and '{second_service}'; rename one of them"
        )
