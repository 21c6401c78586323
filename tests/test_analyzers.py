import json

from analyzers.transcript_analyzer import TranscriptAnalyzer, analyze_transcript
from analyzers.vitals_analyzer import VitalsAnalyzer, analyze_vitals
from llm.llm_client import LLMError
from utils.triage_rules import fallback_vitals_analysis
import utils.triage_rules as triage_rules
import analyzers.vitals_analyzer as vitals_analyzer
import analyzers.transcript_analyzer as transcript_analyzer


class FakeLLM:
    def __init__(self, reply=None, error=None, has_credentials=True):
        self.reply = reply
        self.error = error
        self.has_credentials = has_credentials
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply if isinstance(self.reply, str) else json.dumps(self.reply)


HYPERTENSIVE = {"bloodPressure": {"systolic": 190, "diastolic": 125}}


# -------- transcript --------
def test_transcript_ai_path_is_validated_and_marked():
    llm = FakeLLM("Here is the analysis:\n" + json.dumps({
        "symptoms": [{"name": "migraine", "severity": 15}],
        "medications": [{"name": "sumatriptan"}],
        "vitals": {"bloodPressure": {"systolic": 140}},
        "aiAnalysis": {"summary": "Migraine reported.", "recommendations": ["Rest in a dark room"],
                       "urgencyLevel": "Medium", "confidence": 0.85},
    }))
    out = TranscriptAnalyzer(llm).analyze("Really bad migraine, took sumatriptan")
    assert out.source == "ai"
    assert out.symptoms[0].severity == 10
    assert out.medications[0].dosage == "as mentioned"
    assert out.vitals.to_json() == {}
    assert out.ai_analysis.urgency_level == "medium"
    assert out.ai_analysis.confidence == 0.85
    assert 'TRANSCRIPT: "Really bad migraine, took sumatriptan"' in llm.prompts[0]


def test_transcript_without_credentials_skips_llm():
    llm = FakeLLM({"symptoms": []}, has_credentials=False)
    out = TranscriptAnalyzer(llm).analyze("I'm not feeling too well")
    assert llm.prompts == []
    assert out.source == "fallback"
    assert [s.name for s in out.symptoms] == ["General malaise"]
    assert out.ai_analysis.urgency_level == "low"


def test_transcript_without_client_uses_fallback():
    out = analyze_transcript("I have a terrible headache and chest pain")
    assert out.source == "fallback"
    assert out.ai_analysis.urgency_level == "urgent"


def test_transcript_llm_error_falls_back():
    out = TranscriptAnalyzer(FakeLLM(error=TimeoutError("read timed out"))).analyze("mild cough")
    assert out.source == "fallback"
    assert out.ai_analysis.confidence == 0.5


def test_transcript_malformed_reply_falls_back():
    for reply in ["I cannot help with that.", "{symptoms: [oops}", "[1, 2, 3]"]:
        out = TranscriptAnalyzer(FakeLLM(reply)).analyze("fever")
        assert out.source == "fallback"
        assert [s.name for s in out.symptoms] == ["fever"]


def test_transcript_fallback_failure_returns_minimal(monkeypatch):
    def boom(transcript):
        raise RuntimeError("rules broke")
    monkeypatch.setattr(transcript_analyzer, "fallback_transcript_analysis", boom)
    out = TranscriptAnalyzer(None).analyze("fever")
    assert out.source == "fallback"
    assert "unavailable" in out.ai_analysis.summary
    assert out.ai_analysis.urgency_level == "low"


# -------- vitals --------
def test_vitals_ai_path_backfills_empty_lists():
    llm = FakeLLM({"summary": "Looks fine.", "insights": [], "recommendations": None, "riskLevel": "low"})
    out = VitalsAnalyzer(llm).analyze({"heartRate": {"bpm": 70}})
    assert out.source == "ai"
    assert out.insights == ["Your vitals have been analyzed and recorded."]
    assert out.recommendations == ["Continue regular health monitoring."]


def test_vitals_prompt_contains_only_present_signals():
    llm = FakeLLM({"summary": "ok", "insights": ["fine"], "recommendations": ["keep going"], "riskLevel": "low"})
    VitalsAnalyzer(llm).analyze({"heartRate": {"bpm": 70}, "bloodPressure": {"systolic": 120}})
    assert '"bpm": 70' in llm.prompts[0]
    assert "bloodPressure" not in llm.prompts[0].split("Provide:")[0].split("vital signs:")[1]


def test_vitals_ai_invalid_level_is_normalized():
    llm = FakeLLM({"summary": "ok", "insights": ["a"], "recommendations": ["b"], "riskLevel": "severe"})
    assert VitalsAnalyzer(llm).analyze(HYPERTENSIVE).risk_level == "low"


def test_vitals_timeout_matches_rule_engine_exactly():
    out = VitalsAnalyzer(FakeLLM(error=TimeoutError("deadline exceeded"))).analyze(HYPERTENSIVE)
    assert out == fallback_vitals_analysis(HYPERTENSIVE)
    assert out.risk_level == "critical"
    assert out.source == "fallback"


def test_vitals_llm_error_and_garbage_fall_back():
    assert VitalsAnalyzer(FakeLLM(error=LLMError("503"))).analyze(HYPERTENSIVE).source == "fallback"
    assert VitalsAnalyzer(FakeLLM("no json at all")).analyze(HYPERTENSIVE).source == "fallback"


def test_vitals_without_credentials():
    out = analyze_vitals({"heartRate": {"bpm": 75}})
    assert out.source == "fallback"
    assert out.risk_level == "low"
    assert len(out.insights) == 1


def test_vitals_double_fallback(monkeypatch):
    def boom(vitals):
        raise ValueError("threshold table missing")
    monkeypatch.setattr(vitals_analyzer, "fallback_vitals_analysis", boom)
    out = VitalsAnalyzer(FakeLLM(error=TimeoutError())).analyze(HYPERTENSIVE)
    assert out == triage_rules.minimal_vitals_analysis()
    assert out.summary == "Vitals recorded successfully. Analysis temporarily unavailable."
    assert out.risk_level == "low"


def test_vitals_garbage_input_never_raises():
    out = VitalsAnalyzer(None).analyze("not a dict")
    assert out.source == "fallback"
    assert out.insights == ["Vital signs have been recorded and stored for monitoring"]


# -------- provenance --------
def test_vitals_reply_cannot_claim_fallback_source():
    llm = FakeLLM({"summary": "ok", "insights": ["fine"], "recommendations": ["r1", "r2", "r3", "r4", "r5"],
                   "riskLevel": "low", "source": "fallback"})
    out = VitalsAnalyzer(llm).analyze({"heartRate": {"bpm": 70}})
    assert out.source == "ai"
    assert out.recommendations == ["r1", "r2", "r3"]


def test_transcript_reply_cannot_claim_fallback_source():
    llm = FakeLLM({"symptoms": [{"name": "cough", "severity": 2}], "source": "fallback",
                   "aiAnalysis": {"summary": "Cough.", "urgencyLevel": "low", "confidence": 0.9}})
    out = TranscriptAnalyzer(llm).analyze("a dry cough")
    assert out.source == "ai"
    assert out.ai_analysis.confidence == 0.9
