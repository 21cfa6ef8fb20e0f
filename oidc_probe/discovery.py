"""
OpenID Connect discovery. Fetched once at startup; any failure is fatal for the probe.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from probe_core.config import HTTP_TIMEOUT
from probe_core.errors import DiscoveryError

logger = logging.getLogger(__name__)

WELL_KNOWN_PATH = "/.well-known/openid-configuration"


@dataclass(frozen=True)
class ProviderMetadata:
    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    jwks_uri: str | None = None
    userinfo_endpoint: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


def discovery_url(issuer: str) -> str:
    return issuer.rstrip("/") + WELL_KNOWN_PATH


def discover(issuer: str) -> ProviderMetadata:
    """
    GET {issuer}/.well-known/openid-configuration and validate it.
    Raises DiscoveryError on transport errors, non-2xx, bad JSON, missing endpoints,
    or when the document names a different issuer.
    """
    url = discovery_url(issuer)
    logger.info("Discovering OIDC configuration at %s", url)
    try:
        r = httpx.get(url, headers={"Accept": "application/json"}, timeout=HTTP_TIMEOUT)
    except httpx.HTTPError as e:
        raise DiscoveryError(f"Discovery request failed: {e}") from e

    if not 200 <= r.status_code < 300:
        raise DiscoveryError(f"Discovery returned HTTP {r.status_code}: {r.text[:500]}")
    try:
        data = r.json()
    except ValueError as e:
        raise DiscoveryError(f"Discovery response is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise DiscoveryError("Discovery response is not a JSON object")

    missing = [k for k in ("authorization_endpoint", "token_endpoint") if not data.get(k)]
    if missing:
        raise DiscoveryError("Discovery document missing: " + ", ".join(missing))

    # Issuer in the document must be the one we asked for (OIDC Discovery 1.0 section 4.3)
    doc_issuer = data.get("issuer")
    if doc_issuer and doc_issuer.rstrip("/") != issuer.rstrip("/"):
        raise DiscoveryError(f"Issuer mismatch: expected {issuer}, document says {doc_issuer}")

    logger.info("Discovery successful: %s", json.dumps(data, indent=2))
    return ProviderMetadata(
        issuer=doc_issuer or issuer,
        authorization_endpoint=data["authorization_endpoint"],
        token_endpoint=data["token_endpoint"],
        jwks_uri=data.get("jwks_uri"),
        userinfo_endpoint=data.get("userinfo_endpoint"),
        raw=data,
    )
