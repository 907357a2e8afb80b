"""Errors raised by the environmental data providers."""


class ProviderError(Exception):
    """A third-party data provider failed (transport, HTTP status or payload)."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider
        self.message = message

    def __str__(self):
        return f"Failed to fetch {self.provider} data: {self.message}"


class ProviderConfigError(ProviderError):
    """A provider credential is missing from the configuration."""
