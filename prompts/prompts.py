# prompts/prompts.py
import json
from jinja2 import Template

BASE_SYSTEM_PROMPT = (
    """
You are a medical AI assistant helping people keep a personal health log.
Rules:
- Do NOT make a diagnosis. Describe what was reported and suggest sensible next steps.
- Be conservative with urgency and risk; escalate only on clear indicators.
- Return JSON only. No backticks. No extra text outside the JSON.
"""
)

TRANSCRIPT_PROMPT = Template(
"""
{{ system_prompt }}

You are analyzing a voice transcript for health information.
Extract and structure the following information from the user's speech:

1. SYMPTOMS: name (be specific; for vague terms like "not feeling well" use "General malaise"),
   severity on a 1-10 scale estimated from the language used (3-4 for vague unwellness),
   duration if mentioned otherwise "recent", and any additional notes.
2. MEDICATIONS: name, dosage if specified, frequency/timing if mentioned, notes.
3. VITALS: blood pressure, heart rate, temperature or weight if mentioned.
4. URGENCY: low, medium, high or urgent, based on language intensity, symptom severity and
   emergency indicators. Use "low" for vague unwellness without concerning indicators.
5. SUMMARY: a brief summary of the health concerns. If the statement is vague, say so and
   suggest giving more specific symptoms.
6. RECOMMENDATIONS: 2-3 actionable recommendations.

Do NOT invent specific symptoms (for example headache or fatigue) unless they are explicitly mentioned.

Return exactly one JSON object in this format:
{
  "symptoms": [{"name": "symptom name", "severity": 1, "duration": "duration mentioned", "notes": "additional details"}],
  "medications": [{"name": "medication name", "dosage": "dosage mentioned", "frequency": "frequency mentioned", "notes": "additional details"}],
  "vitals": {
    "bloodPressure": {"systolic": 120, "diastolic": 80},
    "heartRate": {"bpm": 70},
    "temperature": {"value": 36.8, "unit": "celsius"},
    "weight": {"value": 70, "unit": "kg"}
  },
  "aiAnalysis": {
    "summary": "brief summary",
    "recommendations": ["recommendation 1", "recommendation 2"],
    "urgencyLevel": "low",
    "confidence": 0.8
  }
}

Only include vitals that are actually mentioned. Use an empty array or empty object when a category has no information.

TRANSCRIPT: "{{ transcript }}"
"""
)

VITALS_PROMPT = Template(
"""
{{ system_prompt }}

Provide accurate, medically-informed insights and recommendations for the following vital signs:

{{ vitals_json }}

Provide:
1. SUMMARY: a brief, medically accurate summary of what these vitals mean.
2. INSIGHTS: 2-3 key insights (what is normal, what is concerning).
3. RECOMMENDATIONS: 2-3 actionable recommendations based on the actual values.
4. RISK_LEVEL based on medical guidelines:
   - low: all values within normal ranges
   - medium: some values slightly elevated or concerning
   - high: multiple concerning values or one significantly abnormal value
   - critical: values that require immediate medical attention

Do not downplay concerning values (for example systolic BP > 140, heart rate > 100, temperature > 38 °C).
Use friendly but medically accurate language.

Return exactly one JSON object in this format:
{
  "summary": "medically accurate summary",
  "insights": ["insight 1", "insight 2", "insight 3"],
  "recommendations": ["recommendation 1", "recommendation 2"],
  "riskLevel": "low"
}
"""
)


def render_transcript_prompt(transcript: str) -> str:
    return TRANSCRIPT_PROMPT.render(system_prompt=BASE_SYSTEM_PROMPT.strip(), transcript=transcript)


def render_vitals_prompt(vitals: dict) -> str:
    return VITALS_PROMPT.render(
        system_prompt=BASE_SYSTEM_PROMPT.strip(),
        vitals_json=json.dumps(vitals, indent=2),
    )
