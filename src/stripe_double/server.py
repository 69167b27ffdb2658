"""
HTTP mock server - exposes a mock session over HTTP.

Lets code that cannot take an in-process client (another process, a
container, a non-Python service) talk to the same router and store.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stripe_double.encoding import decode_params
from stripe_double.errors import StripeDoubleError, UnsupportedRequestError
from stripe_double.router import error_body
from stripe_double.session import Session

logger = logging.getLogger(__name__)


def create_mock_server(session: Session) -> FastAPI:
    """Create a FastAPI app serving a session.

    Args:
        session: The session to serve. It is started if it is not already.

    Returns:
        A FastAPI application. The session is attached as ``app.state.session``.
    """
    if not session.is_started:
        session.start()

    app = FastAPI(
        title="Mock: Stripe",
        description="Local test double for the Stripe API",
    )
    app.state.session = session

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "state": session.state.value}

    @app.post("/_webhooks/{type_name}")
    async def mint_event(type_name: str, request: Request) -> JSONResponse:
        """Mint a webhook event; the JSON body holds data.object overrides."""
        body = await request.body()
        try:
            overrides: Any = json.loads(body) if body else {}
        except json.JSONDecodeError as e:
            return JSONResponse(error_body(f"Invalid JSON body: {e}"), status_code=400)
        if not isinstance(overrides, dict):
            return JSONResponse(error_body("Overrides must be a JSON object"), status_code=400)

        try:
            payload = session.mock_webhook_payload(type_name, overrides)
        except StripeDoubleError as e:
            return JSONResponse(error_body(e.message, code=e.kind.value), status_code=400)
        return JSONResponse(payload)

    @app.api_route("/v1/{path:path}", methods=["GET", "POST", "DELETE"])
    async def api(path: str, request: Request) -> JSONResponse:
        params = decode_params(request.url.query)
        body = await request.body()
        if body:
            params.update(decode_params(body.decode()))

        with session.recorder.capture(request.method, f"/v1/{path}", params) as entry:
            try:
                status, payload = session.router.dispatch(request.method, f"/v1/{path}", params)
            except UnsupportedRequestError as e:
                entry.error = e.kind.value
                status, payload = 400, error_body(e.message, code=e.kind.value)
            entry.status = status
        return JSONResponse(payload, status_code=status)

    return app
