"""Exceptions raised by lander."""


class ConfigError(Exception):
    """Configuration from the environment is missing or invalid."""


class RuntimeConnectionError(ConnectionError):
    """The Docker daemon could not be reached or refused to list containers."""


class ExtractionError(Exception):
    """A container's labels could not be turned into a link."""

    def __init__(self, container_id: str, reason: str):
        super().__init__(f"{container_id}: {reason}")
        self.container_id = container_id
        self.reason = reason


class ModeDisabledError(ExtractionError):
    """The routing mode needed for extraction is switched off."""


class MalformedLabelError(ExtractionError):
    """A required label is missing or cannot be parsed."""
