"""Dashboard hesapları: geçmişten baştan türetilen istatistikler."""
import random

from app.services.dashboard import (
    DEFAULT_RECOMMENDATIONS,
    aggregate_history,
    generate_recommendations,
    grade,
    score_label,
    weekly_trend,
)


def _entry(score=None, flagged=(), neutral=()):
    insights = [{"name": n, "healthImpact": "concern"} for n in flagged]
    insights += [{"name": n, "healthImpact": "neutral"} for n in neutral]
    data = {"productName": "P", "insights": insights}
    if score is not None:
        data["healthScore"] = score
    return data


def test_empty_history():
    stats = aggregate_history([])
    assert stats.total_scans == 0
    assert stats.avg_health_score == 0
    assert stats.top_concern == "None detected"
    assert stats.top_concern_percentage == 0
    assert stats.recent_alerts == []
    assert stats.nutrition_breakdown[-1].score == 5
    assert len(stats.weekly_trend) == 7


def test_counts_and_average_round_half_up():
    stats = aggregate_history([_entry(6), _entry(7), _entry(3), _entry(9)])
    assert stats.total_scans == 4
    # 25 / 4 = 6.25
    assert stats.avg_health_score == 6
    assert stats.risk_products == 1
    assert stats.safe_products == 2
    assert aggregate_history([_entry(6), _entry(7)]).avg_health_score == 7


def test_missing_score_counts_as_neutral():
    stats = aggregate_history([_entry(), _entry(9)])
    assert stats.avg_health_score == 7
    assert stats.risk_products == 0


def test_empty_entries_are_skipped():
    stats = aggregate_history([None, {}, _entry(8), {"insights": "not-a-list"}])
    assert stats.total_scans == 1


def test_top_concern_tie_keeps_first_seen():
    history = [
        _entry(4, flagged=["Sugar", "Salt"]),
        _entry(4, flagged=["Salt", "Sugar"], neutral=["Water"]),
        _entry(8, flagged=["Palm Oil"]),
    ]
    stats = aggregate_history(history)
    assert stats.top_concern == "Sugar"
    # 2 / 3 = 66.67
    assert stats.top_concern_percentage == 67
    assert [a.ingredient for a in stats.recent_alerts] == ["Sugar", "Salt", "Palm Oil"]
    assert [a.severity for a in stats.recent_alerts] == ["medium", "medium", "low"]


def test_alerts_capped_at_four_and_severity_high():
    history = [_entry(5, flagged=["A", "B", "C", "D", "E"]) for _ in range(3)]
    stats = aggregate_history(history)
    assert len(stats.recent_alerts) == 4
    assert stats.recent_alerts[0].severity == "high"
    assert stats.top_concern_percentage == 100


def test_aggregate_is_idempotent_except_trend():
    history = [_entry(3, flagged=["Sugar"]), _entry(8, flagged=["Salt"])]
    first = aggregate_history(history, ["diabetic"], rng=random.Random(1))
    second = aggregate_history(history, ["diabetic"], rng=random.Random(2))
    assert first.model_dump(exclude={"weekly_trend"}) == second.model_dump(exclude={"weekly_trend"})


def test_recommendations_follow_catalog_order_and_cap():
    recs = generate_recommendations(["vegan", "heart-health", "diabetic", "allergies"])
    assert [r.title for r in recs] == ["Low-GI Alternatives", "Plant-Based Protein", "Allergen-Free Options"]


def test_recommendations_default():
    assert generate_recommendations([]) == list(DEFAULT_RECOMMENDATIONS)
    assert generate_recommendations(["keto"]) == list(DEFAULT_RECOMMENDATIONS)


def test_grade_and_label():
    assert [grade(s) for s in (10, 8, 7, 6, 5, 4, 3)] == ["A+", "A", "B+", "B", "C", "D", "F"]
    assert score_label(None) is None
    assert [score_label(s) for s in (9, 6, 4, 2)] == ["Excellent", "Good", "Moderate", "Poor"]


def test_weekly_trend_shape():
    trend = weekly_trend(random.Random(0))
    assert [t.day for t in trend] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert all(2 <= t.risk <= 4 for t in trend[:3])
    assert all(0 <= t.risk <= 2 for t in trend[3:])
    assert all(2 <= t.safe <= 5 for t in trend[4:])
