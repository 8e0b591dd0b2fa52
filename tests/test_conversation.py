"""Sohbet akışı: mesaj günlüğü, yükleniyor balonu, hata yanıtları, geçmiş yazımı."""
import pytest
from fastapi import HTTPException

from app.schemas.analysis import AnalysisResult, IngredientInsight
from app.services.analyze import CREDITS_EXHAUSTED_DETAIL, RATE_LIMITED_DETAIL
from app.services.conversation import (
    ANALYSIS_FAILED_NOTICE,
    BUSY_REPLY,
    CREDITS_REPLY,
    DEFAULT_IMAGE_PROMPT,
    GENERIC_FAILURE_REPLY,
    ConversationDriver,
    ConversationStatus,
    MockAnalyzer,
    RemoteAnalyzer,
    new_message,
    replace_loading,
)
from app.services.images import PreviewStore
from app.services.ocr import LOW_CONFIDENCE_MESSAGE

RESULT = AnalysisResult(
    product_name="Granola",
    health_score=7,
    summary="Mostly whole grains.",
    insights=[IngredientInsight(name="Oats", health_impact="positive")],
    concerns=["Added sugar"],
)


class Recorder:
    """Analiz ve geçmiş çağrılarını kaydeder."""

    def __init__(self, result=RESULT, error=None):
        self.result = result
        self.error = error
        self.calls = []
        self.history = []

    def analyze(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result

    def write(self, query, result):
        self.history.append((query, result))


def _driver(recorder, previews=None, recognizer=None, concerns=None):
    return ConversationDriver(
        RemoteAnalyzer(health_concerns=concerns, analyze=recorder.analyze),
        history_writer=recorder.write,
        recognizer=recognizer,
        previews=previews if previews is not None else PreviewStore(),
        sleep=lambda s: None,
        summary_delay=0,
    )


def test_replace_loading_removes_placeholder_and_appends():
    log = (new_message("user", "hi"), new_message("assistant", "", is_loading=True))
    reply = new_message("assistant", "hello")
    out = replace_loading(log, reply)
    assert [m.content for m in out] == ["hi", "hello"]
    assert not any(m.is_loading for m in out)
    # orijinal tuple değişmez
    assert log[1].is_loading


def test_blank_submit_is_noop():
    rec = Recorder()
    driver = _driver(rec)
    assert driver.submit("   ") is None
    assert driver.submit(None) is None
    assert driver.messages == ()
    assert driver.status is ConversationStatus.IDLE
    assert rec.calls == []


def test_successful_submit():
    rec = Recorder()
    driver = _driver(rec, concerns=["diabetic"])
    outcome = driver.submit("  Is granola healthy?  ")
    assert outcome.result == RESULT
    assert outcome.notice is None
    assert [m.role for m in driver.messages] == ["user", "assistant"]
    user, reply = driver.messages
    assert user.content == "Is granola healthy?"
    assert reply.content == "Mostly whole grains."
    assert reply.health_score == 7
    assert reply.insights[0].name == "Oats"
    assert not any(m.is_loading for m in driver.messages)
    assert driver.status is ConversationStatus.RESOLVED
    assert driver.is_loading is False
    assert rec.calls[0]["health_concerns"] == ["diabetic"]
    assert rec.history == [("Is granola healthy?", RESULT)]


def test_placeholder_present_while_awaiting():
    seen = {}
    driver = None

    def analyze(**kwargs):
        seen["messages"] = driver.messages
        seen["status"] = driver.status
        seen["loading"] = driver.is_loading
        return RESULT

    driver = ConversationDriver(RemoteAnalyzer(analyze=analyze), previews=PreviewStore())
    driver.submit("hello")
    assert seen["loading"] is True
    assert seen["status"] is ConversationStatus.AWAITING_RESPONSE
    assert [m.is_loading for m in seen["messages"]] == [None, True]


def test_busy_driver_rejects_second_submit():
    rec = Recorder()
    driver = _driver(rec)
    driver.is_loading = True
    with pytest.raises(HTTPException) as exc:
        driver.submit("again")
    assert exc.value.status_code == 409


@pytest.mark.parametrize(
    "error, reply",
    [
        (HTTPException(status_code=429, detail=RATE_LIMITED_DETAIL), BUSY_REPLY),
        (HTTPException(status_code=402, detail=CREDITS_EXHAUSTED_DETAIL), CREDITS_REPLY),
        (HTTPException(status_code=500, detail="No response from AI"), GENERIC_FAILURE_REPLY),
        (RuntimeError("boom"), GENERIC_FAILURE_REPLY),
    ],
)
def test_failure_replaces_placeholder_with_apology(error, reply):
    rec = Recorder(error=error)
    driver = _driver(rec)
    outcome = driver.submit("Check this")
    assert outcome.result is None
    assert outcome.notice == ANALYSIS_FAILED_NOTICE
    assert [m.content for m in driver.messages] == ["Check this", reply]
    assert driver.status is ConversationStatus.FAILED
    assert driver.is_loading is False
    assert rec.history == []


def test_history_write_failure_is_swallowed():
    def failing_writer(query, result):
        raise RuntimeError("db down")

    driver = ConversationDriver(
        RemoteAnalyzer(analyze=lambda **kw: RESULT),
        history_writer=failing_writer,
        previews=PreviewStore(),
    )
    outcome = driver.submit("hello")
    assert outcome.result == RESULT
    assert driver.status is ConversationStatus.RESOLVED
    assert driver.messages[-1].content == RESULT.summary


def test_image_only_submit_uses_default_prompt_and_ocr_text():
    rec = Recorder()
    previews = PreviewStore()
    driver = _driver(rec, previews=previews, recognizer=lambda b, lang: ("Ingredients: oats, honey", 91))
    preview = driver.select_image(b"jpeg-bytes", "image/jpeg")
    assert len(previews) == 1
    outcome = driver.submit("")
    assert outcome.ocr_error is None
    user = driver.messages[0]
    assert user.content == DEFAULT_IMAGE_PROMPT
    assert user.image_url == preview.url
    assert rec.calls[0]["extracted_text"] == "Ingredients: oats, honey"
    assert rec.calls[0]["query"] == ""
    # gönderim sonrası önizleme bırakılır
    assert driver.image is None
    assert len(previews) == 0


def test_unreadable_image_continues_without_text():
    rec = Recorder()
    driver = _driver(rec, recognizer=lambda b, lang: ("", 10))
    driver.select_image(b"png", "image/png")
    outcome = driver.submit("What is this?")
    assert outcome.ocr_error == LOW_CONFIDENCE_MESSAGE
    assert outcome.result == RESULT
    assert rec.calls[0]["extracted_text"] == ""


def test_new_selection_releases_previous_preview():
    previews = PreviewStore()
    driver = _driver(Recorder(), previews=previews)
    first = driver.select_image(b"one", "image/png")
    second = driver.select_image(b"two", "image/png")
    assert previews.get(first.token) is None
    assert previews.get(second.token) is not None
    driver.clear_image()
    assert len(previews) == 0
    assert driver.image is None


def test_failed_submit_also_releases_preview():
    previews = PreviewStore()
    driver = _driver(Recorder(error=RuntimeError("x")), previews=previews, recognizer=lambda b, lang: ("Sugar", 90))
    driver.select_image(b"img", "image/webp")
    driver.submit("")
    assert len(previews) == 0


def test_offline_diabetes_scenario():
    driver = ConversationDriver(MockAnalyzer(latency=0), previews=PreviewStore(), summary_delay=0)
    outcome = driver.submit("Is this safe for diabetics?")
    assert outcome.result.product_name == "Classic Potato Chips"
    assert outcome.result.health_profile.inferred is True
    assert outcome.result.health_profile.concerns[0] == "diabetes"
    reply, summary = driver.messages[1], driver.messages[2]
    assert reply.content == "Based on your diabetes concerns, here's my analysis of Classic Potato Chips:"
    assert [i.name for i in reply.insights] == ["Palm Oil", "MSG (Monosodium Glutamate)", "Salt"]
    assert summary.content == outcome.result.summary
    assert len(driver.messages) == 3


def test_offline_without_concerns_and_latency():
    slept = []
    analyzer = MockAnalyzer(latency=1.5, sleep=slept.append)
    driver = ConversationDriver(analyzer, previews=PreviewStore(), sleep=slept.append, summary_delay=0.5)
    driver.submit("tell me about this cola")
    assert driver.messages[1].content == "Here's my analysis of Cola Beverage:"
    assert slept == [1.5, 0.5]
    assert analyzer.persists_history is False
