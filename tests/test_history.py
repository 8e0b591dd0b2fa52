"""Geçmiş, profil ve dashboard uç noktaları."""
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.core.database import engine
from app.models import AnalysisHistory, Profile, User
from app.schemas.analysis import AnalysisResult, IngredientInsight
from app.services.persistence import save_analysis


def _user_id(client: TestClient, headers: dict) -> int:
    return client.get("/auth/me", headers=headers).json()["id"]


def _save(user_id: int, query: str, result: AnalysisResult) -> int:
    with Session(engine) as db:
        return save_analysis(db, user_id, query, result).id


CHIPS = AnalysisResult(
    product_name="Classic Potato Chips",
    health_score=3,
    summary="Salty snack.",
    insights=[IngredientInsight(name="Salt", health_impact="concern", confidence="high")],
    allergen_alerts=[],
)
CEREAL = AnalysisResult(product_name="Oat Cereal", health_score=8, summary="Whole grain.")


def test_history_round_trip(client: TestClient, auth_headers: dict):
    entry_id = _save(_user_id(client, auth_headers), "snack?", CHIPS)
    r = client.get(f"/history/{entry_id}", headers=auth_headers)
    assert r.status_code == 200
    j = r.json()
    assert j["analysis_result"]["productName"] == "Classic Potato Chips"
    assert j["analysis_result"]["insights"][0]["healthImpact"] == "concern"
    assert j["health_score_label"] == "Poor"
    assert AnalysisResult.model_validate(j["analysis_result"]) == CHIPS
    with Session(engine) as db:
        stored = db.get(AnalysisHistory, entry_id)
        assert stored.analysis_result == CHIPS.to_json()
        assert stored.query == "snack?"


def test_history_newest_first_and_search(client: TestClient, auth_headers: dict):
    uid = _user_id(client, auth_headers)
    _save(uid, "salty snack", CHIPS)
    _save(uid, "breakfast", CEREAL)
    items = client.get("/history", headers=auth_headers).json()
    assert [i["product_name"] for i in items] == ["Oat Cereal", "Classic Potato Chips"]
    found = client.get("/history", params={"q": "CHIPS"}, headers=auth_headers).json()
    assert [i["product_name"] for i in found] == ["Classic Potato Chips"]
    found = client.get("/history", params={"q": "breakfast"}, headers=auth_headers).json()
    assert [i["product_name"] for i in found] == ["Oat Cereal"]
    assert client.get("/history", params={"q": "zzz"}, headers=auth_headers).json() == []


def test_history_is_per_user(client: TestClient, auth_headers: dict, make_user):
    entry_id = _save(_user_id(client, auth_headers), "q", CHIPS)
    other = make_user()
    assert client.get("/history", headers=other).json() == []
    assert client.get(f"/history/{entry_id}", headers=other).status_code == 404
    assert client.delete(f"/history/{entry_id}", headers=other).status_code == 404


def test_history_delete(client: TestClient, auth_headers: dict):
    entry_id = _save(_user_id(client, auth_headers), "q", CHIPS)
    r = client.delete(f"/history/{entry_id}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Entry deleted"}
    r = client.get(f"/history/{entry_id}", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "Entry not found."


def test_profile_defaults_empty(client: TestClient, make_user):
    headers = make_user()
    r = client.get("/profile", headers=headers)
    assert r.status_code == 200
    assert r.json()["health_concerns"] == []
    assert r.json()["display_name"] is None


def test_profile_update_dedupes(client: TestClient, auth_headers: dict):
    r = client.put(
        "/profile",
        json={"display_name": " Sam ", "health_concerns": ["vegan", "keto", "vegan"]},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json()["display_name"] == "Sam"
    assert r.json()["health_concerns"] == ["vegan", "keto"]
    assert client.get("/profile", headers=auth_headers).json()["health_concerns"] == ["vegan", "keto"]


def test_profile_rejects_unknown_concern(client: TestClient, auth_headers: dict):
    r = client.put("/profile", json={"health_concerns": ["vegan", "carnivore"]}, headers=auth_headers)
    assert r.status_code == 422
    assert "carnivore" in r.json()["error"]


def test_dashboard_endpoint(client: TestClient, auth_headers: dict):
    client.put("/profile", json={"health_concerns": ["heart-health"]}, headers=auth_headers)
    uid = _user_id(client, auth_headers)
    _save(uid, "a", CHIPS)
    _save(uid, "b", CEREAL)
    r = client.get("/dashboard", headers=auth_headers)
    assert r.status_code == 200
    j = r.json()
    assert j["totalScans"] == 2
    # (3 + 8) / 2 = 5.5
    assert j["avgHealthScore"] == 6
    assert j["riskProducts"] == 1
    assert j["safeProducts"] == 1
    assert j["topConcern"] == "Salt"
    assert j["topConcernPercentage"] == 50
    assert j["recommendations"][0]["title"] == "Heart-Healthy Choices"
    assert len(j["weeklyTrend"]) == 7


def test_dashboard_empty(client: TestClient, auth_headers: dict):
    j = client.get("/dashboard", headers=auth_headers).json()
    assert j["totalScans"] == 0
    assert j["topConcern"] == "None detected"
    assert j["recommendations"][0]["title"] == "Whole Food Focus"


def test_new_rows_get_timezone_aware_timestamps():
    assert AnalysisHistory(user_id=1).created_at.tzinfo is not None
    assert Profile(user_id=1).created_at.tzinfo is not None
    assert User(email="tz@example.com", hashed_password="x").created_at.tzinfo is not None


def test_profile_update_sets_updated_at(client: TestClient, auth_headers: dict):
    client.put("/profile", json={"health_concerns": ["vegan"]}, headers=auth_headers)
    r = client.put("/profile", json={"health_concerns": ["keto"]}, headers=auth_headers)
    assert r.status_code == 200
    with Session(engine) as db:
        profile = db.exec(select(Profile).where(Profile.user_id == _user_id(client, auth_headers))).first()
        assert profile.health_concerns == ["keto"]
        assert profile.updated_at is not None


def test_chat_analysis_writes_history_row(client: TestClient, auth_headers: dict, fake_gateway):
    session_id = client.post("/chat/sessions", headers=auth_headers).json()["id"]
    client.post(f"/chat/sessions/{session_id}/messages", json={"text": "cereal?"}, headers=auth_headers)
    with Session(engine) as db:
        rows = db.exec(
            select(AnalysisHistory).where(AnalysisHistory.user_id == _user_id(client, auth_headers))
        ).all()
        assert len(rows) == 1
        assert rows[0].created_at is not None
