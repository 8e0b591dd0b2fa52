import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile

from app.api.deps import get_current_user
from app.core.config import is_offline_mode, settings
from app.core.rate_limit import ANALYSIS_LIMIT, ANALYSIS_SCOPE, limiter
from app.models import User
from app.schemas import ChatSessionResponse, SubmitMessageRequest, SubmitMessageResponse
from app.services.conversation import (
    ConversationDriver,
    MockAnalyzer,
    RemoteAnalyzer,
    chat_sessions,
)
from app.services.images import preview_store, validate_image
from app.services.ocr import Recognizer
from app.services.persistence import load_health_concerns, make_history_writer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])
previews_router = APIRouter(tags=["chat"])


def get_recognizer() -> Recognizer | None:
    """None: varsayılan Tesseract tanıyıcı. Testlerde override edilir."""
    return None


@router.post("/sessions", response_model=ChatSessionResponse, response_model_exclude_none=True)
def create_session(
    user: User = Depends(get_current_user),
    recognizer: Recognizer | None = Depends(get_recognizer),
):
    """Oturum başında profil okunur; endişeler bu oturumdaki tüm prompt'lara girer."""
    user_id = user.id or 0
    if is_offline_mode():
        concerns: list[str] = []
        driver = ConversationDriver(MockAnalyzer(), recognizer=recognizer)
    else:
        concerns = load_health_concerns(user_id)
        driver = ConversationDriver(
            RemoteAnalyzer(health_concerns=concerns),
            history_writer=make_history_writer(user_id),
            recognizer=recognizer,
        )
    session = chat_sessions.create(user_id, driver, concerns)
    logger.info("chat session created: id=%s user_id=%s mode=%s", session.id, user_id, settings.analysis_mode)
    return session.to_response()


@router.get("/sessions/{session_id}", response_model=ChatSessionResponse, response_model_exclude_none=True)
def get_session(session_id: str, user: User = Depends(get_current_user)):
    return chat_sessions.get(session_id, user.id or 0).to_response()


@router.delete("/sessions/{session_id}")
def delete_session(session_id: str, user: User = Depends(get_current_user)):
    chat_sessions.delete(session_id, user.id or 0)
    return {"message": "Session closed"}


@router.post("/sessions/{session_id}/image", response_model=ChatSessionResponse, response_model_exclude_none=True)
async def select_image(
    session_id: str,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
):
    """Etiket fotoğrafı seçimi; önceki önizleme bırakılır."""
    session = chat_sessions.get(session_id, user.id or 0)
    try:
        content = await file.read()
    except Exception as e:
        logger.exception("image read error: %s", e)
        raise HTTPException(status_code=400, detail="Could not read the image.")
    content_type = validate_image(content, file.content_type)
    session.driver.select_image(content, content_type)
    return session.to_response()


@router.delete("/sessions/{session_id}/image", response_model=ChatSessionResponse, response_model_exclude_none=True)
def clear_image(session_id: str, user: User = Depends(get_current_user)):
    session = chat_sessions.get(session_id, user.id or 0)
    session.driver.clear_image()
    return session.to_response()


@router.post(
    "/sessions/{session_id}/messages",
    response_model=SubmitMessageResponse,
    response_model_exclude_none=True,
)
@limiter.shared_limit(ANALYSIS_LIMIT, scope=ANALYSIS_SCOPE)
def submit_message(
    request: Request,
    session_id: str,
    body: SubmitMessageRequest,
    user: User = Depends(get_current_user),
):
    """Boş metin + görsel yoksa accepted=false döner, hiçbir mesaj eklenmez."""
    session = chat_sessions.get(session_id, user.id or 0)
    outcome = session.driver.submit(body.text)
    if outcome is None:
        return SubmitMessageResponse(accepted=False, session=session.to_response())
    return SubmitMessageResponse(
        accepted=True,
        session=session.to_response(),
        analysis=outcome.result,
        notice=outcome.notice,
        ocr_error=outcome.ocr_error,
    )


@previews_router.get("/previews/{token}")
def get_preview(token: str):
    preview = preview_store.get(token)
    if preview is None:
        raise HTTPException(status_code=404, detail="Preview not found.")
    return Response(content=preview.content, media_type=preview.content_type)
