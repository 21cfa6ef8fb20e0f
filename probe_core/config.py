"""
Probe configuration. Fixed values for the local test server plus the two WorkOS
credentials, read from the environment once at startup.
"""
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from probe_core.errors import ConfigError

# Callback URL registered for the WorkOS client (redirect URIs must match exactly)
REDIRECT_URI = "http://localhost:3000/callback"

HOST = "localhost"
PORT = 3000

# Only openid is needed to get a code back; AuthKit is selected via the provider hint
SCOPE = "openid"
PROVIDER = "authkit"

WORKOS_API_BASE = "https://api.workos.com"

# Seconds, for discovery and token endpoint calls
HTTP_TIMEOUT = 10.0

# Cookie carrying the opaque id of the pending flow between / and /callback
SESSION_COOKIE = "probe_session"

REQUIRED_ENV = ("WORKOS_CLIENT_ID", "WORKOS_API_KEY")


@dataclass(frozen=True)
class Settings:
    client_id: str
    api_key: str
    log_level: str = "INFO"

    @property
    def client_secret(self) -> str:
        """WorkOS uses the API key as the OAuth client secret."""
        return self.api_key

    @property
    def issuer(self) -> str:
        return f"{WORKOS_API_BASE}/user_management/{self.client_id}"

    def __repr__(self) -> str:
        return f"Settings(client_id={self.client_id!r}, api_key='***', log_level={self.log_level!r})"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from the environment. Raises ConfigError listing every missing
    (or blank) required variable, not just the first one found.
    """
    env = os.environ if environ is None else environ
    values = {name: (env.get(name) or "").strip() for name in REQUIRED_ENV}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigError(missing)
    return Settings(
        client_id=values["WORKOS_CLIENT_ID"],
        api_key=values["WORKOS_API_KEY"],
        log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
