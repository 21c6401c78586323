# utils/triage_rules.py
"""
Deterministic fallback rules used whenever the model path cannot produce a
valid annotation.

Vitals are evaluated one signal at a time (blood pressure, heart rate,
temperature, weight). Each signal may contribute a concern, an insight, a
recommendation and a risk floor; the overall risk level is the highest floor
triggered, starting from "low".
"""
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from schemas import RISK_LEVELS, VitalsSnapshot, TranscriptAnalysis, VitalsAnalysis
from utils.entity_extraction import (
    mentions_general_unwellness, extract_symptom_keywords,
    extract_medication_keywords, urgency_from_keywords,
)
from utils.validator import clean_vitals, validate_transcript_analysis, validate_vitals_analysis

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.5
FOLLOW_UP_RECOMMENDATION = "Maintain regular follow-ups with your healthcare provider"
TRANSCRIPT_RECOMMENDATIONS = [
    "Keep track of your symptoms",
    "Consult with your healthcare provider if symptoms persist",
    "Stay hydrated and get adequate rest",
]


class Finding(NamedTuple):
    insight: str
    concern: Optional[str] = None
    recommendation: Optional[str] = None
    floor: Optional[str] = None


def raise_risk(current: str, floor: Optional[str]) -> str:
    """Monotonic max over low < medium < high < critical."""
    if floor is None:
        return current
    return floor if RISK_LEVELS.index(floor) > RISK_LEVELS.index(current) else current


def _fmt(x: float) -> str:
    return f"{x:g}"


# -------- per-signal rules --------
def blood_pressure_finding(v: VitalsSnapshot) -> Optional[Finding]:
    bp = v.blood_pressure
    if bp is None:
        return None
    s, d = bp.systolic, bp.diastolic
    reading = f"{_fmt(s)}/{_fmt(d)}"
    if s >= 180 or d >= 120:
        return Finding(f"Blood pressure {reading} indicates hypertensive crisis",
                       "Critical hypertension detected",
                       "Seek immediate medical attention for blood pressure management",
                       "critical")
    if s >= 140 or d >= 90:
        return Finding(f"Blood pressure {reading} indicates stage 2 hypertension",
                       "High blood pressure detected",
                       "Consult your healthcare provider about blood pressure management",
                       "high")
    if s >= 130 or d >= 80:
        return Finding(f"Blood pressure {reading} indicates stage 1 hypertension",
                       None,
                       "Monitor blood pressure regularly and discuss with healthcare provider",
                       "medium")
    if s >= 120:
        return Finding(f"Blood pressure {reading} is elevated but not yet hypertensive",
                       None,
                       "Continue monitoring and maintain healthy lifestyle habits")
    return Finding(f"Blood pressure {reading} is within normal range")


def heart_rate_finding(v: VitalsSnapshot) -> Optional[Finding]:
    if v.heart_rate is None:
        return None
    bpm = v.heart_rate.bpm
    if bpm > 120:
        return Finding(f"Heart rate of {_fmt(bpm)} BPM is above normal resting range",
                       "Elevated heart rate",
                       "Monitor heart rate and consult healthcare provider if persistently elevated",
                       "medium")
    if bpm < 50:
        return Finding(f"Heart rate of {_fmt(bpm)} BPM is below normal resting range",
                       "Low heart rate",
                       "Discuss low heart rate with healthcare provider",
                       "medium")
    if bpm < 60:
        return Finding(f"Heart rate of {_fmt(bpm)} BPM is slightly below the typical resting range")
    if bpm > 100:
        return Finding(f"Heart rate of {_fmt(bpm)} BPM is slightly above the typical resting range")
    return Finding(f"Heart rate of {_fmt(bpm)} BPM is within normal resting range")


def temperature_finding(v: VitalsSnapshot) -> Optional[Finding]:
    t = v.temperature
    if t is None:
        return None
    reading = f"{_fmt(t.value)}°{'F' if t.unit == 'fahrenheit' else 'C'}"
    if t.celsius >= 38.0:
        return Finding(f"Temperature indicates fever ({reading})",
                       "Fever detected",
                       "Monitor temperature and seek medical care if fever persists or worsens",
                       "medium")
    if t.celsius < 35.0:
        return Finding(f"Temperature is below normal range ({reading})",
                       "Low body temperature",
                       "Seek medical attention for abnormally low body temperature",
                       "high")
    return Finding(f"Temperature is within normal range ({reading})")


def weight_finding(v: VitalsSnapshot) -> Optional[Finding]:
    if v.weight is None:
        return None
    return Finding(f"Weight recorded as {_fmt(v.weight.value)} {v.weight.unit}",
                   None,
                   "Track weight trends over time for better health monitoring")


SIGNAL_RULES: List[Callable[[VitalsSnapshot], Optional[Finding]]] = [
    blood_pressure_finding,
    heart_rate_finding,
    temperature_finding,
    weight_finding,
]


# -------- fallback builders --------
def evaluate_vitals(vitals: Any) -> Dict[str, Any]:
    """Raw rule-engine output before validation."""
    v = vitals if isinstance(vitals, VitalsSnapshot) else clean_vitals(vitals)
    concerns: List[str] = []
    insights: List[str] = []
    recommendations: List[str] = []
    risk = "low"

    for rule in SIGNAL_RULES:
        f = rule(v)
        if f is None:
            continue
        insights.append(f.insight)
        if f.concern:
            concerns.append(f.concern)
        if f.recommendation:
            recommendations.append(f.recommendation)
        risk = raise_risk(risk, f.floor)

    insights = insights[:3] or ["Vital signs have been recorded and stored for monitoring"]
    recommendations = recommendations[:3] or ["Continue regular health monitoring"]
    recommendations.append(FOLLOW_UP_RECOMMENDATION)

    if concerns:
        plural = "s" if len(concerns) > 1 else ""
        summary = f"{len(concerns)} concerning vital sign{plural} detected: {', '.join(concerns)}."
    else:
        summary = "Your vitals have been recorded. Most values appear within normal ranges."

    return {
        "summary": summary,
        "insights": insights,
        "recommendations": recommendations,
        "riskLevel": risk,
    }


def fallback_vitals_analysis(vitals: Any) -> VitalsAnalysis:
    analysis = validate_vitals_analysis(evaluate_vitals(vitals), source="fallback")
    logger.info("Fallback vitals analysis: risk=%s", analysis.risk_level)
    return analysis


def minimal_vitals_analysis() -> VitalsAnalysis:
    return VitalsAnalysis(
        summary="Vitals recorded successfully. Analysis temporarily unavailable.",
        insights=["Your vitals have been recorded and saved."],
        recommendations=["Continue monitoring your health regularly."],
        risk_level="low",
        source="fallback",
    )


def evaluate_transcript(transcript: str) -> Dict[str, Any]:
    symptoms: List[Dict[str, Any]] = []
    medications: List[Dict[str, Any]] = []

    if mentions_general_unwellness(transcript):
        symptoms.append({
            "name": "General malaise",
            "severity": 3,
            "duration": "recent",
            "notes": "General feeling of being unwell",
        })
    for keyword, severity in extract_symptom_keywords(transcript):
        symptoms.append({"name": keyword, "severity": severity, "duration": "recent", "notes": ""})
    for keyword in extract_medication_keywords(transcript):
        medications.append({"name": keyword, "dosage": "as mentioned", "frequency": "as needed", "notes": ""})

    return {
        "symptoms": symptoms,
        "medications": medications,
        "vitals": {},
        "aiAnalysis": {
            "summary": (f'Voice transcript processed: "{transcript}". Found {len(symptoms)} symptoms '
                        f"and {len(medications)} medications mentioned."),
            "recommendations": list(TRANSCRIPT_RECOMMENDATIONS),
            "urgencyLevel": urgency_from_keywords(transcript),
            "confidence": FALLBACK_CONFIDENCE,
        },
    }


def fallback_transcript_analysis(transcript: str) -> TranscriptAnalysis:
    analysis = validate_transcript_analysis(evaluate_transcript(transcript), transcript, source="fallback")
    logger.info("Fallback transcript analysis: %d symptoms, %d medications, urgency=%s",
                len(analysis.symptoms), len(analysis.medications), analysis.ai_analysis.urgency_level)
    return analysis


def minimal_transcript_analysis(transcript: str) -> TranscriptAnalysis:
    return validate_transcript_analysis({
        "aiAnalysis": {
            "summary": "Transcript recorded successfully. Analysis temporarily unavailable.",
            "recommendations": ["Consult with your healthcare provider if symptoms persist"],
            "urgencyLevel": "low",
            "confidence": FALLBACK_CONFIDENCE,
        },
    }, transcript, source="fallback")
