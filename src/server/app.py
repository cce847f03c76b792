"""FastAPI webhook receiver that feeds a Dispatcher."""

from __future__ import annotations

import hmac
import json
import logging

from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from src.messenger.config import MessengerSettings
from src.messenger.hooks import Dispatcher

logger = logging.getLogger(__name__)


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = MessengerSettings.from_env()
    return create_app(Dispatcher(), verify_token=settings.verify_token)


def create_app(dispatcher: Dispatcher, verify_token: str | None = None) -> FastAPI:
    """Create the webhook app. Signature checks are expected upstream."""
    app = FastAPI(docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/webhook")
    async def verify(request: Request) -> Response:
        params = request.query_params
        if params.get("hub.mode") != "subscribe":
            return JSONResponse({"error": "Unsupported hub.mode"}, status_code=400)

        token = params.get("hub.verify_token", "")
        if verify_token and hmac.compare_digest(token, verify_token):
            return PlainTextResponse(params.get("hub.challenge", ""))
        logger.warning("Rejected webhook subscription with invalid verify token")
        return JSONResponse({"error": "Invalid verify token"}, status_code=403)

    @app.post("/webhook")
    async def receive(request: Request) -> Response:
        body = await request.body()
        try:
            envelope = json.loads(body)
        except json.JSONDecodeError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)
        if not isinstance(envelope, dict):
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

        # Hooks may block (e.g. Sender.deliver); keep them off the event loop.
        report = await run_in_threadpool(dispatcher.receive, envelope)
        # Always 200 so the platform does not redeliver the batch.
        return JSONResponse({
            "dispatched": report.dispatched,
            "ignored": report.ignored,
            "unrecognized": report.unrecognized,
            "failed": report.failed,
        })

    return app
