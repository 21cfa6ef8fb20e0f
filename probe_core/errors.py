"""
Startup errors. Both are fatal: the entry points log them and exit before serving.
"""


class ConfigError(Exception):
    """Required environment variables are missing or blank."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__("Missing required environment variables: " + ", ".join(self.missing))


class DiscoveryError(Exception):
    """Provider metadata could not be fetched or is unusable."""
