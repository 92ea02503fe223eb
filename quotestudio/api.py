"""HTTP boundary exposing calculation and report export."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import AppConfig, load_config
from .engine import calculate_summary
from .exceptions import QuoteStudioError, RenderError
from .reporting import ExportedDocument, check_summary_consistency, export_excel, export_pdf
from .schema import parse_export_request, parse_tasks

logger = logging.getLogger(__name__)

router = APIRouter(tags=["export"])


def _config(request: Request) -> AppConfig:
    return request.app.state.config


def _document_response(document: ExportedDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": document.content_disposition},
    )


@router.post("/export/pdf")
def export_pdf_route(request: Request, payload: Any = Body(default=None)) -> Response:
    config = _config(request)
    tasks, summary = parse_export_request(payload)
    check_summary_consistency(tasks, summary, config)
    return _document_response(export_pdf(summary, config))


@router.post("/export/excel")
def export_excel_route(request: Request, payload: Any = Body(default=None)) -> Response:
    config = _config(request)
    tasks, summary = parse_export_request(payload)
    check_summary_consistency(tasks, summary, config)
    return _document_response(export_excel(summary, config))


@router.post("/calculate", tags=["calculation"])
def calculate_route(request: Request, payload: Any = Body(default=None)) -> dict:
    """Run the estimation engine over a submitted task list."""
    tasks = parse_tasks(payload)
    return calculate_summary(tasks, _config(request).estimation).as_dict()


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    app = FastAPI(title="Quote Studio API", version="0.1.0")

    if config is None:
        config_path = os.getenv("QUOTESTUDIO_CONFIG")
        config = load_config(Path(config_path)) if config_path else AppConfig()
    app.state.config = config

    origins_env = os.getenv("QUOTESTUDIO_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:5000", "http://127.0.0.1:5000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    @app.exception_handler(QuoteStudioError)
    async def handle_quote_error(request: Request, exc: QuoteStudioError) -> JSONResponse:
        if exc.status_code < 500:
            logger.info("Rejected %s: %s", request.url.path, exc.message)
        elif isinstance(exc, RenderError):
            logger.error("Export to %s failed for %s: %s", exc.report_format, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_body_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected %s: malformed body", request.url.path)
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    app.include_router(router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Quote Studio API",
                "docs": "/docs",
                "exports": ["/api/export/pdf", "/api/export/excel"],
            }
        )

    return app


def run() -> None:  # pragma: no cover - manual execution entry point
    import uvicorn

    logging.basicConfig(
        level=os.getenv("QUOTESTUDIO_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    uvicorn.run(
        create_app(),
        host=os.getenv("QUOTESTUDIO_HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
    )
