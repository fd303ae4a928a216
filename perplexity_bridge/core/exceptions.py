"""Custom exception hierarchy for the Perplexity bridge."""


class BridgeError(Exception):
    """Base exception for bridge-level issues."""


class ConfigurationError(BridgeError):
    """Raised when configuration is invalid or missing."""


class ToolNotFoundError(BridgeError, LookupError):
    """Raised when a tool name is not part of the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool not found: {name}")
        self.name = name


class TransportError(BridgeError):
    """Raised when a transport channel fails and cannot recover."""
