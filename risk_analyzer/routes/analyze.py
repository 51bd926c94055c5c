from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from risk_analyzer.core.settings import Settings
from risk_analyzer.routes.responses import error_response
from risk_analyzer.schemas.analysis import AnalysisResponse, AnalyzeRequest, ErrorResponse
from risk_analyzer.services.analyzer import ProjectRiskAnalyzer

router = APIRouter(tags=["analyze"])


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_analyzer(request: Request) -> ProjectRiskAnalyzer:
    return request.app.state.analyzer


@router.post(
    "/analyze",
    summary="Analyzes project-related text and determines key risk points",
    response_model=AnalysisResponse,
    responses={
        200: {"description": "Successfully analyzed project description"},
        400: {"model": ErrorResponse, "description": "Description too short or malformed body"},
        422: {"model": ErrorResponse, "description": "Model output did not match the schema"},
        502: {"model": ErrorResponse, "description": "Model provider failed"},
        504: {"model": ErrorResponse, "description": "Model provider timed out"},
    },
)
async def analyze(
    payload: AnalyzeRequest,
    settings: Settings = Depends(get_settings),
    analyzer: ProjectRiskAnalyzer = Depends(get_analyzer),
):
    outcome = await analyzer.analyze(payload.project_description, api_key=payload.api_key)
    if not outcome.ok:
        return error_response(settings, outcome.error.status_code, outcome.error.message)
    return outcome.result
