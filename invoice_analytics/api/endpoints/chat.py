import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, status, Depends

from invoice_analytics.ai_feature.service import AnalysisService, get_analysis_service
from invoice_analytics.core import schemas
from invoice_analytics.core.sessions import ChatSessionStore, get_session_store

router = APIRouter(prefix="/api/chat", tags=["Chat"])

store_dep = Annotated[ChatSessionStore, Depends(get_session_store)]
service_dep = Annotated[AnalysisService, Depends(get_analysis_service)]


def _get_session_or_404(store: ChatSessionStore, session_id: str) -> schemas.ChatSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Session not found")
    return session


@router.post("/session", response_model=schemas.SessionCreatedResponse)
async def create_session(store: store_dep):
    session = store.create()
    return schemas.SessionCreatedResponse(
        session=schemas.SessionCreated(id=session.id, createdAt=session.createdAt)
    )


@router.get(
    "/session/{session_id}",
    response_model=schemas.SessionResponse,
    response_model_exclude_none=True,
)
async def get_session(session_id: str, store: store_dep):
    """Return the full question/answer history of a session."""
    return schemas.SessionResponse(session=_get_session_or_404(store, session_id))


@router.delete("/session/{session_id}", response_model=schemas.MessageResponse)
async def clear_session(session_id: str, store: store_dep):
    """Clear history but keep the session."""
    store.clear(_get_session_or_404(store, session_id))
    return schemas.MessageResponse(message="Chat history cleared")


@router.post(
    "/message/{session_id}",
    response_model=schemas.ChatMessageResponse,
    response_model_exclude_none=True,
)
async def post_message(
    session_id: str,
    request: schemas.AnalyzeRequest,
    store: store_dep,
    service: service_dep,
):
    """
    Run the question through the analytics pipeline and record both sides in the session.
    """
    session = _get_session_or_404(store, session_id)
    store.append(session, schemas.ChatRole.USER, request.question)

    logging.info(f"Processing question in session {session_id}: {request.question}")
    try:
        result = await service.analyze(request.question)
    except Exception as error:
        logging.error(f"Error in chat analysis: {error}")
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(error) or "An unknown error occurred",
        )

    store.append(
        session, schemas.ChatRole.SYSTEM, result.interpretation, result.statistics
    )
    return schemas.ChatMessageResponse(result=result, sessionId=session_id)
