# utils/entity_extraction.py
from typing import Dict, List, Optional, Tuple

# ---- Keyword vocabularies (case-insensitive substring match) ----
GENERAL_UNWELL_PHRASES = [
    "not feeling well", "not feeling too well", "feeling unwell",
    "feeling sick", "feeling bad", "general malaise",
]

# keyword -> severity used when the keyword is the only evidence
SYMPTOM_SEVERITY: Dict[str, int] = {
    "headache": 3,
    "fever": 4,
    "cough": 2,
    "pain": 3,
    "nausea": 3,
    "dizzy": 3,
    "tired": 2,
    "sore throat": 2,
    "runny nose": 1,
    "stomach ache": 3,
    "back pain": 3,
    "chest pain": 5,
    "shortness of breath": 5,
    "fatigue": 2,
    "weakness": 3,
    "swelling": 3,
    "rash": 2,
}

MEDICATION_KEYWORDS = [
    "aspirin", "ibuprofen", "tylenol", "acetaminophen", "advil",
    "medication", "pills", "tablet", "mg", "ml", "prescription",
]

# checked in this order; the first tier with any hit wins
URGENCY_TIERS: List[Tuple[str, List[str]]] = [
    ("urgent", ["severe", "emergency", "urgent", "emergency room", "can't breathe", "chest pain"]),
    ("high", ["bad", "terrible", "horrible", "can't", "worst", "excruciating"]),
    ("medium", ["moderate", "concerning", "worried", "uncomfortable"]),
]


def _normalize(text: Optional[str]) -> str:
    # speech-to-text often emits typographic apostrophes
    return (text or "").lower().replace("’", "'")


def mentions_general_unwellness(text: str) -> bool:
    t = _normalize(text)
    return any(p in t for p in GENERAL_UNWELL_PHRASES)


def extract_symptom_keywords(text: str) -> List[Tuple[str, int]]:
    """(keyword, severity) pairs in vocabulary order."""
    t = _normalize(text)
    return [(k, sev) for k, sev in SYMPTOM_SEVERITY.items() if k in t]


def extract_medication_keywords(text: str) -> List[str]:
    t = _normalize(text)
    return [m for m in MEDICATION_KEYWORDS if m in t]


def urgency_from_keywords(text: str) -> str:
    t = _normalize(text)
    for level, keywords in URGENCY_TIERS:
        if any(k in t for k in keywords):
            return level
    return "low"
