from __future__ import annotations

from fastapi.responses import JSONResponse

from risk_analyzer.core.settings import Settings


def error_response(settings: Settings, status_code: int, message: str) -> JSONResponse:
    if settings.legacy_error_status:
        status_code = 500
    return JSONResponse(status_code=status_code, content={"error": message})
