# utils/validator.py
"""
Normalizes untrusted annotation candidates (parsed model output or rule-engine
output) into the canonical result models.

Nothing in here raises: a field that cannot be interpreted is replaced by its
documented default. Validation is idempotent, i.e. feeding a validated result
back in returns an equal result.
"""
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from schemas import (
    URGENCY_LEVELS, RISK_LEVELS,
    Symptom, MedicationMention, BloodPressure, HeartRate, Temperature, Weight,
    VitalsSnapshot, AIAnalysis, TranscriptAnalysis, VitalsAnalysis,
)

DEFAULT_SEVERITY = 5
DEFAULT_CONFIDENCE = 0.7
DEFAULT_VITALS_INSIGHT = "Your vitals have been analyzed and recorded."
DEFAULT_VITALS_RECOMMENDATION = "Continue regular health monitoring."
MAX_INSIGHTS = 3
# the rule engine appends one constant follow-up recommendation after its top 3
MAX_RECOMMENDATIONS = {"ai": 3, "fallback": 4}


def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return value if isinstance(value, dict) else {}


def _pick(d: Dict[str, Any], *keys: str, default=None):
    for k in keys:
        if d.get(k) is not None:
            return d[k]
    return default


def _num(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _positive(value: Any) -> Optional[float]:
    f = _num(value)
    return f if f is not None and f > 0 else None


def _text(value: Any, default: str) -> str:
    if value is None or isinstance(value, (dict, list)):
        return default
    s = str(value).strip()
    return s or default


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    out = []
    for item in value:
        if item is None or isinstance(item, (dict, list)):
            continue
        s = str(item).strip()
        if s:
            out.append(s)
    return out


def _level(value: Any, allowed) -> str:
    s = str(value or "").strip().lower()
    return s if s in allowed else "low"


def _source(value: Any, default: str) -> str:
    return value if value in ("ai", "fallback") else default


def without_source(parsed: Dict[str, Any]) -> Dict[str, Any]:
    """Model replies never choose their own provenance; the caller sets it."""
    return {k: v for k, v in parsed.items() if k != "source"}


def _timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(timezone.utc)


# -------- per-item cleaning --------
def clean_symptom(raw: Any) -> Symptom:
    d = _as_dict(raw)
    severity = _num(d.get("severity"))
    severity = DEFAULT_SEVERITY if severity is None else int(round(min(max(severity, 1), 10)))
    return Symptom(
        name=_text(d.get("name"), "Unknown symptom"),
        severity=severity,
        duration=_text(d.get("duration"), "recent"),
        notes=_text(d.get("notes"), ""),
    )


def clean_medication(raw: Any) -> MedicationMention:
    d = _as_dict(raw)
    return MedicationMention(
        name=_text(d.get("name"), "Unknown medication"),
        dosage=_text(d.get("dosage"), "as mentioned"),
        frequency=_text(d.get("frequency"), "as needed"),
        notes=_text(d.get("notes"), ""),
    )


def clean_vitals(raw: Any) -> VitalsSnapshot:
    """Keep only sub-objects whose defining numeric fields are present."""
    d = _as_dict(raw)
    out = VitalsSnapshot()

    bp = _as_dict(_pick(d, "bloodPressure", "blood_pressure"))
    sys_, dia = _positive(bp.get("systolic")), _positive(bp.get("diastolic"))
    if sys_ is not None and dia is not None:
        out.blood_pressure = BloodPressure(systolic=sys_, diastolic=dia)

    hr = _as_dict(_pick(d, "heartRate", "heart_rate"))
    bpm = _positive(hr.get("bpm"))
    if bpm is not None:
        out.heart_rate = HeartRate(bpm=bpm)

    temp = _as_dict(d.get("temperature"))
    value = _positive(temp.get("value"))
    if value is not None:
        unit = "fahrenheit" if str(temp.get("unit") or "").strip().lower().startswith("f") else "celsius"
        out.temperature = Temperature(value=value, unit=unit)

    weight = _as_dict(d.get("weight"))
    value = _positive(weight.get("value"))
    if value is not None:
        unit = "lbs" if str(weight.get("unit") or "").strip().lower() in ("lb", "lbs", "pound", "pounds") else "kg"
        out.weight = Weight(value=value, unit=unit)

    return out


# -------- whole results --------
def validate_transcript_analysis(candidate: Any, transcript: str = "", source: str = "ai") -> TranscriptAnalysis:
    d = _as_dict(candidate)
    ai = _as_dict(_pick(d, "aiAnalysis", "ai_analysis"))

    symptoms = d.get("symptoms")
    medications = d.get("medications")
    symptoms = symptoms if isinstance(symptoms, list) else []
    medications = medications if isinstance(medications, list) else []

    confidence = _num(ai.get("confidence"))
    confidence = DEFAULT_CONFIDENCE if confidence is None else min(max(confidence, 0.0), 1.0)

    default_summary = f'Voice transcript processed: "{(transcript or "")[:100]}..."'

    return TranscriptAnalysis(
        symptoms=[clean_symptom(s) for s in symptoms],
        medications=[clean_medication(m) for m in medications],
        vitals=clean_vitals(d.get("vitals")),
        ai_analysis=AIAnalysis(
            summary=_text(ai.get("summary"), default_summary),
            recommendations=_string_list(ai.get("recommendations")),
            urgency_level=_level(_pick(ai, "urgencyLevel", "urgency_level"), URGENCY_LEVELS),
            confidence=confidence,
            processed_at=_timestamp(_pick(ai, "processedAt", "processed_at")),
        ),
        source=_source(d.get("source"), source),
    )


def validate_vitals_analysis(candidate: Any, source: str = "ai") -> VitalsAnalysis:
    d = _as_dict(candidate)
    source = _source(d.get("source"), source)

    insights = _string_list(d.get("insights"))[:MAX_INSIGHTS]
    recommendations = _string_list(d.get("recommendations"))[:MAX_RECOMMENDATIONS[source]]

    return VitalsAnalysis(
        summary=_text(d.get("summary"), "Your vitals have been recorded."),
        insights=insights or [DEFAULT_VITALS_INSIGHT],
        recommendations=recommendations or [DEFAULT_VITALS_RECOMMENDATION],
        risk_level=_level(_pick(d, "riskLevel", "risk_level"), RISK_LEVELS),
        source=source,
    )
