import pytest

from schemas import VitalsSnapshot
from utils.triage_rules import (
    evaluate_vitals, fallback_vitals_analysis, raise_risk, FOLLOW_UP_RECOMMENDATION,
)


def bp(s, d):
    return {"bloodPressure": {"systolic": s, "diastolic": d}}


def test_hypertensive_crisis_is_critical():
    out = fallback_vitals_analysis(bp(190, 125))
    assert out.risk_level == "critical"
    assert any("hypertensive crisis" in i for i in out.insights)
    assert out.source == "fallback"


@pytest.mark.parametrize("s,d", [(180, 70), (150, 120), (240, 130)])
def test_crisis_thresholds_force_critical(s, d):
    assert fallback_vitals_analysis(bp(s, d)).risk_level == "critical"


@pytest.mark.parametrize("s,d", [(140, 70), (179, 85), (120, 90), (135, 119)])
def test_stage_2_is_high(s, d):
    out = fallback_vitals_analysis(bp(s, d))
    assert out.risk_level == "high"
    assert "stage 2 hypertension" in out.insights[0]


def test_stage_1_is_medium():
    out = fallback_vitals_analysis(bp(132, 78))
    assert out.risk_level == "medium"
    assert "stage 1" in out.insights[0]


def test_elevated_bp_is_informational_only():
    out = fallback_vitals_analysis(bp(125, 75))
    assert out.risk_level == "low"
    assert "elevated but not yet hypertensive" in out.insights[0]


def test_partial_blood_pressure_is_ignored():
    out = fallback_vitals_analysis({"bloodPressure": {"systolic": 200}})
    assert out.risk_level == "low"
    assert out.insights == ["Vital signs have been recorded and stored for monitoring"]


def test_normal_heart_rate_only():
    out = fallback_vitals_analysis({"heartRate": {"bpm": 75}})
    assert out.risk_level == "low"
    assert out.insights == ["Heart rate of 75 BPM is within normal resting range"]
    assert out.summary == "Your vitals have been recorded. Most values appear within normal ranges."
    assert not any("Blood pressure" in i or "Temperature" in i or "Weight" in i for i in out.insights)


@pytest.mark.parametrize("bpm", [121, 49, 30])
def test_abnormal_heart_rate_is_medium(bpm):
    assert fallback_vitals_analysis({"heartRate": {"bpm": bpm}}).risk_level == "medium"


@pytest.mark.parametrize("bpm,word", [(55, "slightly below"), (50, "slightly below"), (110, "slightly above"), (120, "slightly above")])
def test_borderline_heart_rate_is_noted_without_raising_risk(bpm, word):
    out = fallback_vitals_analysis({"heartRate": {"bpm": bpm}})
    assert out.risk_level == "low"
    assert word in out.insights[0]


def test_fever_in_fahrenheit_is_converted():
    out = fallback_vitals_analysis({"temperature": {"value": 101.5, "unit": "fahrenheit"}})
    assert out.risk_level == "medium"
    assert out.insights == ["Temperature indicates fever (101.5°F)"]


def test_hypothermia_is_high():
    out = fallback_vitals_analysis({"temperature": {"value": 34.2, "unit": "celsius"}})
    assert out.risk_level == "high"
    assert "Low body temperature" in out.summary


def test_weight_never_changes_risk():
    out = fallback_vitals_analysis({"weight": {"value": 180, "unit": "lbs"}})
    assert out.risk_level == "low"
    assert out.insights == ["Weight recorded as 180 lbs"]


def test_risk_is_max_of_floors():
    vitals = {
        "bloodPressure": {"systolic": 135, "diastolic": 85},   # medium
        "heartRate": {"bpm": 130},                            # medium
        "temperature": {"value": 34.0, "unit": "celsius"},    # high
    }
    out = fallback_vitals_analysis(vitals)
    assert out.risk_level == "high"
    assert out.summary == "2 concerning vital signs detected: Elevated heart rate, Low body temperature."


def test_lists_truncated_and_follow_up_appended():
    vitals = {
        "bloodPressure": {"systolic": 150, "diastolic": 95},
        "heartRate": {"bpm": 130},
        "temperature": {"value": 39.0, "unit": "celsius"},
        "weight": {"value": 80, "unit": "kg"},
    }
    out = fallback_vitals_analysis(vitals)
    assert len(out.insights) == 3
    assert not any("Weight" in i for i in out.insights)
    assert len(out.recommendations) == 4
    assert out.recommendations[-1] == FOLLOW_UP_RECOMMENDATION


def test_no_recommendation_signals_get_default_plus_follow_up():
    out = fallback_vitals_analysis({"heartRate": {"bpm": 72}})
    assert out.recommendations == ["Continue regular health monitoring", FOLLOW_UP_RECOMMENDATION]


def test_fallback_is_deterministic():
    vitals = {"bloodPressure": {"systolic": 142, "diastolic": 91}, "temperature": {"value": 38.4}}
    assert fallback_vitals_analysis(vitals) == fallback_vitals_analysis(vitals)


def test_accepts_snapshot_instances():
    snap = VitalsSnapshot.model_validate({"heartRate": {"bpm": 80}})
    assert evaluate_vitals(snap)["insights"] == ["Heart rate of 80 BPM is within normal resting range"]


def test_raise_risk_never_lowers():
    assert raise_risk("high", "medium") == "high"
    assert raise_risk("low", None) == "low"
    assert raise_risk("medium", "critical") == "critical"


@pytest.mark.parametrize("temperature,risk,word", [
    ({"value": 38.0, "unit": "celsius"}, "medium", "fever"),
    ({"value": 37.9, "unit": "celsius"}, "low", "within normal range"),
    ({"value": 35.0, "unit": "celsius"}, "low", "within normal range"),
    ({"value": 34.9, "unit": "celsius"}, "high", "below normal range"),
    ({"value": 100.4, "unit": "fahrenheit"}, "medium", "fever"),
    ({"value": 95.0, "unit": "fahrenheit"}, "low", "within normal range"),
])
def test_temperature_threshold_edges(temperature, risk, word):
    out = fallback_vitals_analysis({"temperature": temperature})
    assert out.risk_level == risk
    assert word in out.insights[0]


@pytest.mark.parametrize("bpm", [60, 100])
def test_heart_rate_normal_band_is_inclusive(bpm):
    out = fallback_vitals_analysis({"heartRate": {"bpm": bpm}})
    assert out.risk_level == "low"
    assert out.insights == [f"Heart rate of {bpm} BPM is within normal resting range"]


@pytest.mark.parametrize("s,d,risk", [(179, 119, "high"), (139, 89, "medium"), (129, 79, "low"), (119, 79, "low")])
def test_blood_pressure_just_below_each_threshold(s, d, risk):
    assert fallback_vitals_analysis(bp(s, d)).risk_level == risk
