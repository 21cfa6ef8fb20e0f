"""
WorkOS SDK probe (variant B).
The authorization URL and the code exchange (plus user profile lookup) are
delegated to the WorkOS Python SDK. GET /, /callback. Port 3000.
"""
import logging
import sys
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from workos import WorkOSClient

from probe_core.callback import CallbackParams, check_callback
from probe_core.config import (
    HOST,
    PORT,
    PROVIDER,
    REDIRECT_URI,
    SESSION_COOKIE,
    Settings,
    configure_logging,
    load_settings,
)
from probe_core.errors import ConfigError
from probe_core.flow_store import FlowStore, PendingFlow
from probe_core.pages import TRY_AGAIN, exception_page, install_not_found_handler, pretty, render_page, sign_in_page
from probe_core.pkce import generate_session_id, generate_state

logger = logging.getLogger(__name__)


def build_workos_client(settings: Settings) -> WorkOSClient:
    # client_id is bound here; authenticate_with_code uses it implicitly
    return WorkOSClient(api_key=settings.api_key, client_id=settings.client_id)


def to_jsonable(obj: Any) -> Any:
    """SDK responses are pydantic models; plain dicts pass through."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    return obj


def create_app(settings: Settings, workos_client: Any, store: FlowStore | None = None) -> FastAPI:
    store = store if store is not None else FlowStore()
    app = FastAPI(title="WorkOS SDK Test", version="0.1.0")
    app.state.settings = settings
    app.state.flows = store
    install_not_found_handler(app)

    @app.get("/", response_class=HTMLResponse)
    def home():
        """Render the SDK-built sign-in link; state is tracked per browser session."""
        session_id = generate_session_id()
        state = generate_state()
        store.put(session_id, PendingFlow(state=state))

        url = workos_client.user_management.get_authorization_url(
            provider=PROVIDER,
            redirect_uri=REDIRECT_URI,
            state=state,
        )
        response = sign_in_page("WorkOS SDK Test", "Sign in with WorkOS (SDK)", url)
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
        return response

    @app.get("/callback", response_class=HTMLResponse)
    def callback(request: Request):
        params = CallbackParams.from_request(request)
        flow = store.pop(request.cookies.get(SESSION_COOKIE))

        page = check_callback(params, flow)
        if page is not None:
            return page

        try:
            auth_response = workos_client.user_management.authenticate_with_code(code=params.code)
        except Exception as e:
            logger.exception("Auth failed")
            return exception_page("Authentication Failed", e)

        full = to_jsonable(auth_response)
        user = full.get("user") if isinstance(full, dict) else None
        logger.info("Authenticated user id=%s", (user or {}).get("id"))
        return render_page(
            "Authentication Successful",
            "<h1>Authentication Successful</h1>\n"
            f"<h2>User</h2>\n<pre>{pretty(user)}</pre>\n"
            f"<h2>Full Response</h2>\n<pre>{pretty(full)}</pre>\n{TRY_AGAIN}",
        )

    return app


def main() -> None:
    try:
        settings = load_settings()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    configure_logging(settings.log_level)

    import uvicorn

    logger.info("Server running at http://%s:%s", HOST, PORT)
    uvicorn.run(create_app(settings, build_workos_client(settings)), host=HOST, port=PORT)


if __name__ == "__main__":
    main()
