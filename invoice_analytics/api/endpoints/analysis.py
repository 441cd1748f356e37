import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, HTTPException, status, Depends

from invoice_analytics.ai_feature.service import AnalysisService, get_analysis_service
from invoice_analytics.core import schemas

router = APIRouter(prefix="/api", tags=["Analysis"])

service_dep = Annotated[AnalysisService, Depends(get_analysis_service)]


@router.post("/analyze", response_model=schemas.AnalyzeResponse, response_model_exclude_none=True)
async def analyze_question(request: schemas.AnalyzeRequest, service: service_dep):
    """Answer one question with an interpretation and a chart, no session involved."""
    logging.info(f"Processing analysis request: {request.question}")
    try:
        result = await service.analyze(request.question)
    except Exception as error:
        logging.error(f"Error in analysis: {error}")
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(error) or "An unknown error occurred",
        )
    return schemas.AnalyzeResponse(result=result)


@router.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
