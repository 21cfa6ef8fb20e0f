"""
Diagnostic HTML pages shared by both probes. Raw provider data is dumped as JSON
in <pre> blocks for manual inspection.
"""
import html
import json
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

TRY_AGAIN = '<p><a href="/">Try again</a></p>'


def escape(value: Any) -> str:
    # Text inside <pre>/<p> only needs &, < and > escaped; keep quotes readable in JSON dumps
    return html.escape("" if value is None else str(value), quote=False)


def pretty(data: Any) -> str:
    """JSON dump (indent=2) escaped for a <pre> block."""
    return escape(json.dumps(data, indent=2, default=str))


def render_page(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{escape(title)}</title></head>
<body>
{body}
</body>
</html>""",
        status_code=status_code,
    )


def sign_in_page(title: str, link_text: str, auth_url: str, details: str = "") -> HTMLResponse:
    return render_page(
        title,
        f"""  <h1>{escape(title)}</h1>
  {details}
  <p><a href="{html.escape(auth_url)}">{escape(link_text)}</a></p>""",
    )


def auth_error_page(error: str, description: str | None) -> HTMLResponse:
    return render_page(
        "Auth Error",
        f"<h1>Auth Error</h1><pre>{escape(error)}: {escape(description or '')}</pre>{TRY_AGAIN}",
        status_code=400,
    )


def state_mismatch_page(expected: str | None, got: str | None) -> HTMLResponse:
    return render_page(
        "State Mismatch",
        f"<h1>State Mismatch</h1><pre>expected: {escape(expected or '(none)')}\n"
        f"got: {escape(got or '(none)')}</pre>{TRY_AGAIN}",
        status_code=400,
    )


def missing_code_page() -> HTMLResponse:
    return render_page("Missing Code", f"<h1>Missing Code</h1>{TRY_AGAIN}", status_code=400)


def exception_page(heading: str, exc: BaseException, trace: str | None = None) -> HTMLResponse:
    """Render an exception caught while talking to the provider (message and traceback)."""
    body = f"<h1>{escape(heading)}</h1>\n<pre>{escape(exc)}</pre>"
    if trace:
        body += f"\n<pre>{escape(trace)}</pre>"
    return render_page(heading, body + TRY_AGAIN, status_code=502)


def not_found() -> PlainTextResponse:
    return PlainTextResponse("Not found", status_code=404)


def install_not_found_handler(app: FastAPI) -> None:
    """Unknown paths get a plain-text 404 instead of FastAPI's JSON body."""

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return not_found()
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)
