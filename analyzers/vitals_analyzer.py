# analyzers/vitals_analyzer.py
import logging
from typing import Any

from schemas import VitalsSnapshot, VitalsAnalysis
from prompts.prompts import render_vitals_prompt
from utils.json_extract import try_parse_llm_json
from utils.validator import clean_vitals, validate_vitals_analysis, without_source
from utils.triage_rules import fallback_vitals_analysis, minimal_vitals_analysis
from llm.llm_client import has_credentials

logger = logging.getLogger(__name__)


class VitalsAnalyzer:
    """Vital-sign readings -> canonical VitalsAnalysis.

    Model first, threshold rules on any failure, constant response if the
    rules themselves fail. Never raises.
    """

    def __init__(self, llm=None):
        self.llm = llm

    def analyze(self, vitals: Any) -> VitalsAnalysis:
        try:
            snapshot = vitals if isinstance(vitals, VitalsSnapshot) else clean_vitals(vitals)
        except Exception:
            logger.exception("Could not read vitals input")
            return minimal_vitals_analysis()

        if not has_credentials(self.llm):
            logger.warning("No LLM credentials configured; using threshold fallback")
            return self._fallback(snapshot)

        try:
            raw = self.llm.generate(render_vitals_prompt(snapshot.to_json()))
            parsed = try_parse_llm_json(raw)
            if parsed is None:
                logger.warning("No valid JSON object in vitals LLM response; using threshold fallback")
                return self._fallback(snapshot)
            analysis = validate_vitals_analysis(without_source(parsed), source="ai")
        except Exception as e:
            logger.warning("Vitals LLM analysis failed (%s); using threshold fallback", e)
            return self._fallback(snapshot)

        logger.info("Vitals analyzed by LLM: risk=%s", analysis.risk_level)
        return analysis

    def _fallback(self, snapshot: VitalsSnapshot) -> VitalsAnalysis:
        try:
            return fallback_vitals_analysis(snapshot)
        except Exception:
            logger.exception("Threshold fallback failed; returning minimal response")
            return minimal_vitals_analysis()


def analyze_vitals(vitals: Any, llm=None) -> VitalsAnalysis:
    return VitalsAnalyzer(llm).analyze(vitals)
