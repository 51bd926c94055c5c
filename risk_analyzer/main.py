from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Callable, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from risk_analyzer.api_routes import router as api_router
from risk_analyzer.core.logging import configure_logging
from risk_analyzer.core.settings import Settings
from risk_analyzer.routes.responses import error_response
from risk_analyzer.services.analyzer import ProjectRiskAnalyzer
from risk_analyzer.services.llm_client import LLMConfig, TextLLM, build_llm

logger = structlog.get_logger(__name__)

DOCS_PATH = "/api-docs"


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"] or ["body"]
        parts.append(f"{'.'.join(loc)}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request body"


def create_app(
    settings: Optional[Settings] = None,
    llm_factory: Callable[[LLMConfig], TextLLM] = build_llm,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Server is running",
            docs_url=f"http://localhost:{settings.port}{DOCS_PATH}",
            provider=settings.llm_provider,
        )
        yield

    app = FastAPI(
        title="Project Risk Analyzer API",
        version="1.0.0",
        docs_url=DOCS_PATH,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.analyzer = ProjectRiskAnalyzer(settings, llm_factory=llm_factory)

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(request: Request, exc: RequestValidationError):
        return error_response(settings, 400, _validation_message(exc))

    @app.exception_handler(Exception)
    async def on_unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
