from __future__ import annotations
from fastapi import APIRouter
from risk_analyzer.routes.analyze import router as analyze_router
from risk_analyzer.routes.format_json import router as format_json_router
from risk_analyzer.routes.health import router as health_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(format_json_router)
router.include_router(analyze_router)
