"""
Generic OIDC probe (variant A).
Discovers the WorkOS user management issuer at startup, builds the PKCE
authorization URL itself and exchanges the code with a manual JSON POST.
GET /, /callback. Port 3000.
"""
import logging
import sys
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from oidc_probe.claims import inspect_token_response
from oidc_probe.discovery import ProviderMetadata, discover
from oidc_probe.token_exchange import exchange_code
from probe_core.callback import CallbackParams, check_callback
from probe_core.config import (
    HOST,
    PORT,
    PROVIDER,
    REDIRECT_URI,
    SCOPE,
    SESSION_COOKIE,
    Settings,
    configure_logging,
    load_settings,
)
from probe_core.errors import ConfigError, DiscoveryError
from probe_core.flow_store import FlowStore, PendingFlow
from probe_core.pages import (
    TRY_AGAIN,
    escape,
    exception_page,
    install_not_found_handler,
    pretty,
    render_page,
    sign_in_page,
)
from probe_core.pkce import build_authorize_url, generate_pkce, generate_session_id, generate_state

logger = logging.getLogger(__name__)


def create_app(settings: Settings, provider: ProviderMetadata, store: FlowStore | None = None) -> FastAPI:
    """Build the probe app around already-discovered provider metadata."""
    store = store if store is not None else FlowStore()
    app = FastAPI(title="WorkOS OIDC Generic Client Test", version="0.1.0")
    app.state.settings = settings
    app.state.provider = provider
    app.state.flows = store
    install_not_found_handler(app)

    @app.get("/", response_class=HTMLResponse)
    def home():
        """Generate state + PKCE for this browser session and render the sign-in link."""
        session_id = generate_session_id()
        state = generate_state()
        code_verifier, code_challenge = generate_pkce()
        store.put(session_id, PendingFlow(state=state, code_verifier=code_verifier))

        url = build_authorize_url(
            provider.authorization_endpoint,
            client_id=settings.client_id,
            redirect_uri=REDIRECT_URI,
            scope=SCOPE,
            state=state,
            code_challenge=code_challenge,
            provider=PROVIDER,
        )
        response = sign_in_page(
            "WorkOS OIDC Generic Client Test",
            "Sign in with WorkOS (generic OIDC)",
            url,
            details=f"<p>Issuer: {escape(provider.issuer)}</p>",
        )
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
        return response

    @app.get("/callback", response_class=HTMLResponse)
    def callback(request: Request):
        """Validate the redirect from the provider, then exchange the code for tokens."""
        logger.info("Callback received: %s", request.url.path)
        params = CallbackParams.from_request(request)
        flow = store.pop(request.cookies.get(SESSION_COOKIE))

        page = check_callback(params, flow)
        if page is not None:
            return page

        try:
            result = exchange_code(
                provider.token_endpoint,
                client_id=settings.client_id,
                client_secret=settings.client_secret,
                code=params.code,
                code_verifier=flow.code_verifier,
            )
        except Exception as e:
            logger.exception("Token exchange failed")
            return exception_page("Token Exchange Failed", e, traceback.format_exc())

        if not result.ok:
            return render_page(
                "Token Exchange Failed",
                f"<h1>Token Exchange Failed ({result.status_code})</h1>\n"
                f"<pre>{pretty(result.data)}</pre>\n{TRY_AGAIN}",
                # Provider-side failures (5xx) surface as a bad gateway
                status_code=502 if result.status_code >= 500 else 400,
            )

        decoded = inspect_token_response(result.data, provider.jwks_uri)
        decoded_html = f"\n<h2>Decoded Tokens</h2>\n<pre>{pretty(decoded)}</pre>" if decoded else ""
        return render_page(
            "Authentication Successful",
            "<h1>Authentication Successful</h1>\n<h2>Token Response</h2>\n"
            f"<pre>{pretty(result.data)}</pre>{decoded_html}\n{TRY_AGAIN}",
        )

    return app


def main() -> None:
    """Load settings, discover the provider (fatal on failure), then serve."""
    try:
        settings = load_settings()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    configure_logging(settings.log_level)

    try:
        provider = discover(settings.issuer)
    except DiscoveryError as e:
        logger.error("Discovery failed: %s", e)
        sys.exit(1)

    import uvicorn

    logger.info("Server running at http://%s:%s", HOST, PORT)
    uvicorn.run(create_app(settings, provider), host=HOST, port=PORT)


if __name__ == "__main__":
    main()
