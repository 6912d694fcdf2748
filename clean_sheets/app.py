"""FastAPI application exposing the cell analysis endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import AppConfig, config_from_env
from .llm_client import LLMClient
from .models import parse_cells
from .pipeline import analyze_cells

LOGGER = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze"


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_llm_factory() -> Callable[..., LLMClient]:
    """Return the callable used to build the per-request LLM client."""

    return LLMClient


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def _read_data(request: Request) -> Any:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None
    return body.get("data")


def create_app(config: AppConfig | None = None) -> FastAPI:
    app = FastAPI(
        title="Clean Sheets AI API",
        description="Data cleaning suggestions for spreadsheet cells",
        version="1.0.0",
    )
    app.state.config = config or AppConfig()

    cors_headers = {
        "Access-Control-Allow-Origin": app.state.config.cors_allow_origin,
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(cors_headers)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse(status_code=405, content={"error": "Method not allowed"})
        return await http_exception_handler(request, exc)

    @app.options(ANALYZE_PATH)
    async def analyze_preflight() -> Response:
        return Response(status_code=200)

    @app.post(ANALYZE_PATH)
    async def analyze(
        request: Request,
        config: AppConfig = Depends(get_config),
        llm_factory: Callable[..., LLMClient] = Depends(get_llm_factory),
    ) -> JSONResponse:
        try:
            data = await _read_data(request)
            if not isinstance(data, list) or not data:
                return _error(400, "No data provided")

            api_key = config.llm.resolve_api_key()
            if not api_key:
                return _error(500, "API key not configured")

            cells = parse_cells(data)

            LOGGER.info("Analyzing %d cells", len(cells))

            async with llm_factory(config.llm, api_key) as llm_client:
                issues = await analyze_cells(cells, config.analysis, llm_client)

            return JSONResponse(status_code=200, content={"success": True, "issues": issues})
        except Exception as exc:
            LOGGER.exception("API Error: %s", exc)
            return _error(500, str(exc))

    return app


app = create_app(config_from_env())
