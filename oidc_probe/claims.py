"""
Decode tokens returned by the token endpoint for display. Claims are shown even
when the signature cannot be checked; the signature result is reported alongside.
"""
import logging
import threading
from typing import Any

import jwt
from jwt import PyJWKClient

from probe_core.config import HTTP_TIMEOUT

logger = logging.getLogger(__name__)

ALLOWED_ALGORITHMS = ["RS256", "ES256"]

# One client per JWKS URI; PyJWKClient caches the JWK set and keys
_jwks_clients: dict[str, PyJWKClient] = {}
_lock = threading.Lock()


def get_jwks_client(jwks_uri: str) -> PyJWKClient:
    with _lock:
        client = _jwks_clients.get(jwks_uri)
        if client is None:
            client = PyJWKClient(uri=jwks_uri, cache_jwk_set=True, lifespan=300, timeout=int(HTTP_TIMEOUT))
            _jwks_clients[jwks_uri] = client
    return client


def _verify_signature(token: str, jwks_uri: str) -> str:
    try:
        signing_key = get_jwks_client(jwks_uri).get_signing_key_from_jwt(token)
        jwt.decode(
            token,
            signing_key.key,
            algorithms=ALLOWED_ALGORITHMS,
            options={"verify_aud": False},
        )
    except jwt.PyJWTError as e:
        logger.debug("Token signature check failed: %s", e)
        return f"invalid: {e}"
    return "verified"


def inspect_token(token: str, jwks_uri: str | None = None) -> dict[str, Any]:
    """
    Returns {"header", "claims", "signature"} for a JWT, or {"error"} when the
    value is not a decodable JWT (opaque tokens are allowed by OAuth).
    """
    try:
        header = jwt.get_unverified_header(token)
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        return {"error": f"not a JWT: {e}"}

    signature = _verify_signature(token, jwks_uri) if jwks_uri else "not checked"
    return {"header": header, "claims": claims, "signature": signature}


def inspect_token_response(data: Any, jwks_uri: str | None = None) -> dict[str, dict[str, Any]]:
    """Inspect id_token and access_token of a token response, when present."""
    if not isinstance(data, dict):
        return {}
    inspected = {}
    for name in ("id_token", "access_token"):
        value = data.get(name)
        if isinstance(value, str) and value:
            inspected[name] = inspect_token(value, jwks_uri)
    return inspected
