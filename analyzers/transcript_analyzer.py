# analyzers/transcript_analyzer.py
import logging

from schemas import TranscriptAnalysis
from prompts.prompts import render_transcript_prompt
from utils.json_extract import try_parse_llm_json
from utils.validator import validate_transcript_analysis, without_source
from utils.triage_rules import fallback_transcript_analysis, minimal_transcript_analysis
from llm.llm_client import has_credentials

logger = logging.getLogger(__name__)


class TranscriptAnalyzer:
    """Voice transcript -> canonical TranscriptAnalysis.

    Model first, keyword rules on any failure. Never raises.
    """

    def __init__(self, llm=None):
        self.llm = llm

    def analyze(self, transcript: str) -> TranscriptAnalysis:
        transcript = transcript or ""
        if not has_credentials(self.llm):
            logger.warning("No LLM credentials configured; using keyword fallback")
            return self._fallback(transcript)

        try:
            raw = self.llm.generate(render_transcript_prompt(transcript))
        except Exception as e:
            logger.warning("Transcript LLM call failed (%s); using keyword fallback", e)
            return self._fallback(transcript)

        parsed = try_parse_llm_json(raw)
        if parsed is None:
            logger.warning("No valid JSON object in transcript LLM response; using keyword fallback")
            return self._fallback(transcript)

        try:
            analysis = validate_transcript_analysis(without_source(parsed), transcript, source="ai")
        except Exception:
            logger.exception("Validation of transcript LLM response failed; using keyword fallback")
            return self._fallback(transcript)
        logger.info("Transcript analyzed by LLM: %d symptoms, urgency=%s",
                    len(analysis.symptoms), analysis.ai_analysis.urgency_level)
        return analysis

    def _fallback(self, transcript: str) -> TranscriptAnalysis:
        try:
            return fallback_transcript_analysis(transcript)
        except Exception:
            logger.exception("Keyword fallback failed for transcript of length %d", len(transcript))
            return minimal_transcript_analysis(transcript)


def analyze_transcript(transcript: str, llm=None) -> TranscriptAnalysis:
    return TranscriptAnalyzer(llm).analyze(transcript)
