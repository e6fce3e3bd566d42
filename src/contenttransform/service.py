"""HTTP surface: POST a record batch, get the records back with extracted text."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from contenttransform.config import ServiceSettings, load_settings
from contenttransform.runtime import BatchAborted, BatchOrchestrator

logger = logging.getLogger(__name__)

FATAL_MESSAGE = "Non-recoverable error while extracting content.\n"


class MalformedPayload(ValueError):
    """Raised when the request body is not a JSON object or array."""


def parse_records(body: bytes) -> List[Dict[str, Any]]:
    """Decode a request body into the ordered list of records.

    A single object is a batch of one. Array elements that are not objects
    are dropped.
    """
    try:
        root = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedPayload(f"Request body is not valid JSON: {exc}") from exc

    if isinstance(root, list):
        return [element for element in root if isinstance(element, dict)]
    if isinstance(root, dict):
        return [root]
    raise MalformedPayload("Request body must be a JSON object or an array of objects")


def create_app(
    settings: Optional[ServiceSettings] = None,
    *,
    orchestrator: Optional[BatchOrchestrator] = None,
) -> FastAPI:
    """Build the application around one process-wide orchestrator."""
    settings = settings or load_settings()
    orchestrator = orchestrator or BatchOrchestrator.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Content transform service ready (threads=%d, source=%s, target=%s)",
            settings.threads,
            orchestrator.source_field,
            orchestrator.target_field,
        )
        yield
        orchestrator.shutdown(wait=False)

    app = FastAPI(title="Content Transform", lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    @app.post("/transform")
    async def transform(request: Request) -> Response:
        body = await request.body()
        try:
            records = parse_records(body)
        except MalformedPayload as exc:
            logger.warning("Rejected batch: %s", exc)
            return PlainTextResponse(f"{exc}\n", status_code=400)

        result = await run_in_threadpool(orchestrator.run, records)
        try:
            output = result.require_records()
        except BatchAborted:
            return PlainTextResponse(FATAL_MESSAGE, status_code=500)
        return JSONResponse(content=output)

    return app


__all__ = ["FATAL_MESSAGE", "MalformedPayload", "create_app", "parse_records"]
