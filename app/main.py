from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api_routes import AVAILABLE_ROUTES, router as api_router
from app.core.errors import ValidationError
from app.core.logging_config import setup_logging
from app.core.settings import Settings, get_settings, require_api_key
from app.services.pipeline import AnalysisService

logger = logging.getLogger(__name__)


def _log_banner(settings: Settings) -> None:
    logger.info("Backend server started")
    logger.info("URL: http://localhost:%s", settings.port)
    logger.info("API key: %s", "configured" if settings.GEMINI_API_KEY else "missing")
    logger.info("Model: %s", settings.llm_model)
    logger.info("Environment: %s", settings.environment)
    logger.info("Routes: %s", ", ".join(AVAILABLE_ROUTES))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)

    # refuse to serve anything without a credential
    require_api_key(settings)
    app.state.analysis_service = AnalysisService.from_settings(settings)

    _log_banner(settings)
    yield


_settings = get_settings()

app = FastAPI(title="Thinker Perspectives Analyzer (Gemini)", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    # unreadable body or non-string subject is answered like a too-short subject
    return JSONResponse(status_code=400, content={"error": str(ValidationError())})


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    # unknown path or known path with the wrong method: both answered as not found
    if exc.status_code not in (404, 405):
        return await http_exception_handler(request, exc)
    return JSONResponse(
        status_code=404,
        content={"error": "Route non trouvée", "availableRoutes": AVAILABLE_ROUTES},
    )
