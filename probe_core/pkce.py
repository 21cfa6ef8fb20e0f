"""
PKCE (RFC 7636) and authorization request helpers. S256 only.
"""
import hashlib
import secrets
from base64 import urlsafe_b64encode
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def generate_state() -> str:
    """Opaque value for CSRF protection; echoed back on the callback."""
    return secrets.token_urlsafe(32)


def generate_session_id() -> str:
    """Opaque id for the session cookie that keys the pending flow."""
    return secrets.token_urlsafe(24)


def generate_code_verifier() -> str:
    # 32 bytes -> 43 chars base64url (RFC 7636 recommendation)
    return secrets.token_urlsafe(32)


def code_challenge_s256(code_verifier: str) -> str:
    """BASE64URL(SHA256(ASCII(code_verifier))) without padding."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce() -> tuple[str, str]:
    """
    Generate code_verifier and code_challenge (S256).
    Returns (code_verifier, code_challenge).
    """
    code_verifier = generate_code_verifier()
    return code_verifier, code_challenge_s256(code_verifier)


def build_authorize_url(
    authorization_endpoint: str,
    *,
    client_id: str,
    redirect_uri: str,
    scope: str,
    state: str,
    code_challenge: str,
    provider: str | None = None,
) -> str:
    """Build the authorization URL; keeps any query already on the endpoint."""
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "scope": scope,
        "state": state,
        "code_challenge": code_challenge,
        "code_challenge_method": "S256",
    }
    if provider:
        params["provider"] = provider
    parts = urlsplit(authorization_endpoint)
    query = parse_qsl(parts.query, keep_blank_values=True) + list(params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))
