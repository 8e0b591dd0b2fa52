"""Sohbet akışı: kullanıcı mesajı -> yükleniyor balonu -> gerçek yanıt veya özür.

Mesaj günlüğü değişmez bir tuple; her güncelleme yeni tuple üretir (filtrele + ekle).
Durumlar: idle -> submitted -> awaiting-response -> resolved | failed.
"""
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Protocol

from fastapi import HTTPException

from app.core.config import settings
from app.schemas.analysis import AnalysisResult, HealthProfile
from app.schemas.chat import ChatMessage, ChatSessionResponse
from app.services.analyze import analyze_ingredients
from app.services.concerns import infer_health_concerns
from app.services.images import Preview, PreviewStore, preview_store
from app.services.mock_data import get_mock_analysis
from app.services.ocr import Recognizer, extract_text
from app.services.persistence import HistoryWriter

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_PROMPT = "Analyze this food label"
ANALYSIS_FAILED_NOTICE = "Analysis failed. Please try again."
BUSY_REPLY = "I'm a bit busy right now. Please try again in a moment."
CREDITS_REPLY = "I've run out of analysis credits for now. Please try again later."
GENERIC_FAILURE_REPLY = (
    "I had trouble analyzing that. Could you try a clearer image or describe the product you're asking about?"
)

MessageLog = tuple[ChatMessage, ...]


class ConversationStatus(str, Enum):
    IDLE = "idle"
    SUBMITTED = "submitted"
    AWAITING_RESPONSE = "awaiting-response"
    RESOLVED = "resolved"
    FAILED = "failed"


def new_message(role: str, content: str = "", **fields) -> ChatMessage:
    return ChatMessage(
        id=uuid.uuid4().hex[:12],
        role=role,
        content=content,
        timestamp=datetime.now(timezone.utc),
        **fields,
    )


def append_message(log: MessageLog, message: ChatMessage) -> MessageLog:
    return log + (message,)


def replace_loading(log: MessageLog, message: ChatMessage) -> MessageLog:
    """Yükleniyor balon(lar)ını çıkarıp asıl mesajı sona ekler."""
    return tuple(m for m in log if not m.is_loading) + (message,)


def failure_reply(exc: Exception) -> str:
    status = exc.status_code if isinstance(exc, HTTPException) else None
    if status == 429:
        return BUSY_REPLY
    if status == 402:
        return CREDITS_REPLY
    return GENERIC_FAILURE_REPLY


class Analyzer(Protocol):
    persists_history: bool

    def analyze(self, query: str, extracted_text: str) -> AnalysisResult: ...

    def reply(self, query: str, result: AnalysisResult) -> ChatMessage: ...

    def follow_ups(self, result: AnalysisResult) -> list[str]: ...


class RemoteAnalyzer:
    """AI gateway üzerinden analiz; kullanıcının profildeki endişeleri prompt'a girer."""

    persists_history = True

    def __init__(
        self,
        health_concerns: list[str] | None = None,
        product_name: str | None = None,
        analyze: Callable[..., AnalysisResult] = analyze_ingredients,
    ):
        self.health_concerns = list(health_concerns or [])
        self.product_name = product_name
        self._analyze = analyze

    def analyze(self, query: str, extracted_text: str) -> AnalysisResult:
        return self._analyze(
            query=query,
            extracted_text=extracted_text,
            product_name=self.product_name,
            health_concerns=self.health_concerns,
        )

    def reply(self, query: str, result: AnalysisResult) -> ChatMessage:
        return new_message(
            "assistant",
            result.summary,
            insights=result.insights,
            health_score=result.health_score,
            concerns=result.concerns,
            recommendations=result.recommendations,
            allergen_alerts=result.allergen_alerts,
            drug_interactions=result.drug_interactions,
        )

    def follow_ups(self, result: AnalysisResult) -> list[str]:
        return []


class MockAnalyzer:
    """Offline mod: sabit tablo + sorgudan çıkarılan endişeler. Geçmişe yazılmaz."""

    persists_history = False

    def __init__(self, latency: float | None = None, sleep: Callable[[float], None] = time.sleep):
        self.latency = settings.mock_latency_seconds if latency is None else latency
        self._sleep = sleep

    def analyze(self, query: str, extracted_text: str) -> AnalysisResult:
        if self.latency > 0:
            self._sleep(self.latency)
        analysis = get_mock_analysis(query or extracted_text)
        inferred = infer_health_concerns(query)
        base = analysis.health_profile.concerns if analysis.health_profile else []
        merged = list(dict.fromkeys(inferred + list(base)))
        return analysis.model_copy(update={"health_profile": HealthProfile(concerns=merged, inferred=True)})

    def reply(self, query: str, result: AnalysisResult) -> ChatMessage:
        product = result.product_name or "this product"
        inferred = infer_health_concerns(query)
        if inferred:
            content = f"Based on your {' and '.join(inferred)} concerns, here's my analysis of {product}:"
        else:
            content = f"Here's my analysis of {product}:"
        return new_message("assistant", content, insights=result.insights)

    def follow_ups(self, result: AnalysisResult) -> list[str]:
        return [result.summary] if result.summary else []


@dataclass
class SubmissionOutcome:
    result: AnalysisResult | None = None
    notice: str | None = None
    ocr_error: str | None = None


class ConversationDriver:
    def __init__(
        self,
        analyzer: Analyzer,
        *,
        history_writer: HistoryWriter | None = None,
        recognizer: Recognizer | None = None,
        previews: PreviewStore = preview_store,
        sleep: Callable[[float], None] = time.sleep,
        summary_delay: float | None = None,
    ):
        self.analyzer = analyzer
        self.messages: MessageLog = ()
        self.status = ConversationStatus.IDLE
        self.is_loading = False
        self.image: Preview | None = None
        self._history_writer = history_writer
        self._recognizer = recognizer
        self._previews = previews
        self._sleep = sleep
        self._summary_delay = settings.summary_delay_seconds if summary_delay is None else summary_delay
        self._lock = threading.Lock()

    def select_image(self, content: bytes, content_type: str) -> Preview:
        """Yeni görsel seçimi: önceki önizleme bırakılır."""
        self.clear_image()
        self.image = self._previews.create(content, content_type)
        return self.image

    def clear_image(self) -> None:
        if self.image is not None:
            self._previews.release(self.image.token)
            self.image = None

    def submit(self, text: str | None) -> SubmissionOutcome | None:
        """Boş metin ve görsel yoksa hiçbir şey yapmaz (None)."""
        query = (text or "").strip()
        with self._lock:
            if not query and self.image is None:
                return None
            if self.is_loading:
                raise HTTPException(status_code=409, detail="An analysis is already in progress.")
            self.is_loading = True
        image = self.image
        self.status = ConversationStatus.SUBMITTED
        self.messages = append_message(
            self.messages,
            new_message("user", query or DEFAULT_IMAGE_PROMPT, image_url=image.url if image else None),
        )
        self.messages = append_message(self.messages, new_message("assistant", "", is_loading=True))
        self.status = ConversationStatus.AWAITING_RESPONSE

        outcome = SubmissionOutcome()
        try:
            extracted_text = self._extract(image, outcome)
            result = self.analyzer.analyze(query, extracted_text)
        except Exception as e:
            logger.exception("Analysis error: %s", e)
            self.messages = replace_loading(self.messages, new_message("assistant", failure_reply(e)))
            self.status = ConversationStatus.FAILED
            outcome.notice = ANALYSIS_FAILED_NOTICE
        else:
            outcome.result = result
            self.messages = replace_loading(self.messages, self.analyzer.reply(query, result))
            self.status = ConversationStatus.RESOLVED
        finally:
            self.is_loading = False
            self.clear_image()

        if outcome.result is not None:
            for follow_up in self.analyzer.follow_ups(outcome.result):
                if self._summary_delay > 0:
                    self._sleep(self._summary_delay)
                self.messages = append_message(self.messages, new_message("assistant", follow_up))
            if self.analyzer.persists_history:
                self._write_history(query, outcome.result)
        return outcome

    def _extract(self, image: Preview | None, outcome: SubmissionOutcome) -> str:
        if image is None:
            return ""
        ocr = extract_text(image.content, recognizer=self._recognizer)
        if not ocr.success:
            outcome.ocr_error = ocr.error
            return ""
        return ocr.text

    def _write_history(self, query: str, result: AnalysisResult) -> None:
        if self._history_writer is None:
            return
        try:
            self._history_writer(query, result)
        except Exception as e:
            # Geçmiş yazılamadı: sohbet sonucu değişmez
            logger.warning("History insert failed: %s", e)


@dataclass
class ChatSession:
    id: str
    user_id: int
    driver: ConversationDriver
    health_concerns: list[str]

    def to_response(self) -> ChatSessionResponse:
        driver = self.driver
        return ChatSessionResponse(
            id=self.id,
            status=driver.status.value,
            is_loading=driver.is_loading,
            image_url=driver.image.url if driver.image else None,
            health_concerns=self.health_concerns,
            messages=list(driver.messages),
        )


class ChatSessionStore:
    """Bellek içi oturum kaydı; her oturum tek kullanıcıya aittir."""

    def __init__(self) -> None:
        self._sessions: dict[str, ChatSession] = {}
        self._lock = threading.Lock()

    def create(self, user_id: int, driver: ConversationDriver, health_concerns: list[str]) -> ChatSession:
        session = ChatSession(id=uuid.uuid4().hex, user_id=user_id, driver=driver, health_concerns=health_concerns)
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, session_id: str, user_id: int) -> ChatSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None or session.user_id != user_id:
            raise HTTPException(status_code=404, detail="Chat session not found.")
        return session

    def delete(self, session_id: str, user_id: int) -> None:
        session = self.get(session_id, user_id)
        session.driver.clear_image()
        with self._lock:
            self._sessions.pop(session_id, None)


chat_sessions = ChatSessionStore()
