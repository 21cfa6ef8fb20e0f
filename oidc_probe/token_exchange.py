"""
Manual authorization code exchange. WorkOS expects a JSON body (not form-encoded)
carrying both the client secret and the PKCE code_verifier.
"""
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from probe_core.config import HTTP_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class TokenResult:
    status_code: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def exchange_code(
    token_endpoint: str,
    *,
    client_id: str,
    client_secret: str,
    code: str,
    code_verifier: str | None,
) -> TokenResult:
    """
    POST the code to the token endpoint. The body is parsed as JSON whatever the
    status; transport and JSON errors propagate to the caller.
    """
    logger.info("Exchanging code at %s", token_endpoint)
    r = httpx.post(
        token_endpoint,
        json={
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": code_verifier,
        },
        headers={"Accept": "application/json"},
        timeout=HTTP_TIMEOUT,
    )
    data = r.json()
    keys = sorted(data) if isinstance(data, dict) else type(data).__name__
    logger.info("Token response status=%s keys=%s", r.status_code, keys)
    return TokenResult(status_code=r.status_code, data=data)
