from __future__ import annotations

import json

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["format"])


@router.post(
    "/formatJson",
    summary="Formats plain text to correct json string",
    openapi_extra={
        "requestBody": {
            "content": {
                "text/plain": {"schema": {"type": "string"}},
                "application/json": {"schema": {}},
            },
        },
    },
    responses={200: {"description": "Successfully converted plain text to json"}},
)
async def format_json(request: Request):
    raw = await request.body()
    content_type = request.headers.get("content-type", "").lower()

    if "json" in content_type:
        if not raw.strip():
            # an empty JSON body parses as an empty object
            return JSONResponse(content={})
        try:
            body = json.loads(raw)
        except ValueError as e:
            return JSONResponse(status_code=400, content={"error": f"Invalid JSON body: {e}"})
    else:
        body = raw.decode("utf-8", errors="replace")

    return JSONResponse(content=body)
