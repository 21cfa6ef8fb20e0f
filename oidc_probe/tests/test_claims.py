"""Tests for decoding returned tokens and checking signatures against JWKS."""
import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import jwt
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives.asymmetric.rsa import generate_private_key

from oidc_probe.claims import inspect_token, inspect_token_response

JWKS_URI = "https://api.workos.com/sso/jwks/client_123"


def _make_token(key, **claims):
    now = int(time.time())
    payload = {"sub": "user_01", "iss": "https://api.workos.com", "iat": now, "exp": now + 300, **claims}
    return jwt.encode(payload, key, algorithm="RS256", headers={"kid": "test-key"})


def _jwks_client_for(key):
    client = MagicMock()
    client.get_signing_key_from_jwt.return_value = SimpleNamespace(key=key.public_key())
    return client


def test_inspect_without_jwks():
    key = generate_private_key(65537, 2048, default_backend())
    result = inspect_token(_make_token(key, sid="session_01"))
    assert result["header"]["kid"] == "test-key"
    assert result["claims"]["sub"] == "user_01"
    assert result["claims"]["sid"] == "session_01"
    assert result["signature"] == "not checked"


def test_inspect_verified_signature():
    key = generate_private_key(65537, 2048, default_backend())
    with patch("oidc_probe.claims.get_jwks_client", return_value=_jwks_client_for(key)):
        result = inspect_token(_make_token(key), JWKS_URI)
    assert result["signature"] == "verified"


def test_inspect_wrong_key_reports_invalid():
    key = generate_private_key(65537, 2048, default_backend())
    other = generate_private_key(65537, 2048, default_backend())
    with patch("oidc_probe.claims.get_jwks_client", return_value=_jwks_client_for(other)):
        result = inspect_token(_make_token(key), JWKS_URI)
    assert result["signature"].startswith("invalid:")
    assert result["claims"]["sub"] == "user_01"


def test_inspect_opaque_token():
    result = inspect_token("t1", JWKS_URI)
    assert "error" in result
    assert "not a JWT" in result["error"]


def test_inspect_token_response_picks_tokens():
    key = generate_private_key(65537, 2048, default_backend())
    data = {"access_token": _make_token(key), "refresh_token": "rt", "user": {"id": "user_01"}}
    result = inspect_token_response(data)
    assert list(result) == ["access_token"]
    assert result["access_token"]["claims"]["sub"] == "user_01"


def test_inspect_token_response_non_dict():
    assert inspect_token_response(["not", "a", "dict"]) == {}


def test_jwks_client_cached_with_timeout():
    from oidc_probe import claims

    with patch("oidc_probe.claims.PyJWKClient") as client_cls, patch.dict(claims._jwks_clients, clear=True):
        first = claims.get_jwks_client(JWKS_URI)
        second = claims.get_jwks_client(JWKS_URI)
    assert first is second
    client_cls.assert_called_once()
    assert client_cls.call_args.kwargs["uri"] == JWKS_URI
    assert client_cls.call_args.kwargs["timeout"] == 10
