"""
Callback validation shared by both probes: provider error, state check, code presence.
"""
import logging
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import HTMLResponse

from probe_core.flow_store import PendingFlow
from probe_core.pages import auth_error_page, missing_code_page, state_mismatch_page

logger = logging.getLogger(__name__)


@dataclass
class CallbackParams:
    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None

    @classmethod
    def from_request(cls, request: Request) -> "CallbackParams":
        """First value of each query parameter; blank values count as absent."""
        q = request.query_params
        return cls(
            code=q.get("code") or None,
            state=q.get("state") or None,
            error=q.get("error") or None,
            error_description=q.get("error_description") or None,
        )


def check_callback(params: CallbackParams, flow: PendingFlow | None) -> HTMLResponse | None:
    """
    Run the pre-exchange checks in order. Returns the terminal page for the first
    failing check, or None when the code can be exchanged.
    """
    if params.error:
        logger.info("Provider returned error=%s", params.error)
        return auth_error_page(params.error, params.error_description)

    expected = flow.state if flow else None
    if expected is None or params.state != expected:
        logger.warning("State mismatch (pending flow found: %s)", flow is not None)
        return state_mismatch_page(expected, params.state)

    if not params.code:
        return missing_code_page()

    return None
