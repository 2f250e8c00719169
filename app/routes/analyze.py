from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.schemas.inputs import AnalyzeRequest
from app.services.pipeline import AnalysisService

router = APIRouter(prefix="/api", tags=["analyze"])


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


@router.post("/analyze")
async def analyze(payload: AnalyzeRequest, service: AnalysisService = Depends(get_analysis_service)):
    outcome = await service.handle(payload.subject)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
