"""FastAPI application exposing the answer engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import config
from .exceptions import GenerationError, InvalidQueryError
from .responses import SAFE_ERROR_MESSAGE

if TYPE_CHECKING:
    from .pipeline import Services

logger = config.get_logger(__name__)


class QueryInput(BaseModel):
    q: str | None = None
    lastBotMessage: str | None = None  # noqa: N815


class SuggestInput(BaseModel):
    q: str | None = None


def _server_error() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Temporary issue", "message": SAFE_ERROR_MESSAGE},
    )


def create_app(services: Services) -> FastAPI:
    """Build the HTTP app around already-constructed services.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(title="Agent K")
    app.state.services = services
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(_request: Request, _exc: RequestValidationError):  # noqa: ANN202
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(Exception)
    async def unhandled(_request: Request, _exc: Exception):  # noqa: ANN202
        logger.exception("Unhandled error while serving request")
        return _server_error()

    @app.get("/")
    def status() -> dict:
        retrieval = services.retrieval
        return {
            "status": f"{services.engine.persona_name} running",
            "entries": len(retrieval),
            "semantic": "enabled" if retrieval.semantic_enabled else "disabled",
        }

    @app.post("/query")
    def query(payload: QueryInput):  # noqa: ANN202
        if not payload.q or not payload.q.strip():
            return JSONResponse(status_code=400, content={"error": "Query required"})
        try:
            answer = services.engine.answer(payload.q, payload.lastBotMessage or "")
        except InvalidQueryError:
            return JSONResponse(status_code=400, content={"error": "Query required"})
        except GenerationError:
            logger.exception("Generation failed for query")
            return _server_error()
        return {"answer": answer}

    @app.post("/suggest")
    def suggest(payload: SuggestInput | None = None) -> dict:
        q = payload.q if payload else None
        return {"suggestions": services.suggestions.suggest(q)}

    return app
