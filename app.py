# app.py
import hashlib
import logging
from typing import Any, Dict

import streamlit as st

from schemas import TranscriptAnalysis, VitalsAnalysis
from llm.llm_client import LLMClient
from analyzers.transcript_analyzer import TranscriptAnalyzer
from analyzers.vitals_analyzer import VitalsAnalyzer
from utils.validator import clean_vitals
from utils.settings import load_llm_settings, load_storage_settings
from utils.db import log_record

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# =========================
# Page config
# =========================
st.set_page_config(page_title="Voice Health Log", page_icon="🩺", layout="wide")

LEVEL_BADGE = {
    "low": "🟢", "medium": "🟡", "high": "🟠", "urgent": "🔴", "critical": "🔴",
}


# =========================
# Helper functions
# =========================
def _owner_id(raw: str, anonymize: bool) -> str:
    raw = (raw or "").strip() or "anonymous"
    if anonymize:
        return hashlib.sha256(raw.encode()).hexdigest()[:10]
    return raw


def _save(owner: str, raw_input: Any, annotation) -> None:
    try:
        log_record(owner, raw_input, annotation, storage)
        st.success("Saved (opt-in logging).")
    except Exception as e:
        st.warning(f"Could not save: {e}")


def render_transcript_analysis(a: TranscriptAnalysis) -> None:
    ai = a.ai_analysis
    st.markdown(f"**Urgency:** {LEVEL_BADGE[ai.urgency_level]} {ai.urgency_level}  \n"
                f"**Source:** {a.source} · **Confidence:** {ai.confidence:.2f}")
    st.write(ai.summary)
    if a.symptoms:
        st.subheader("Symptoms")
        st.table([s.model_dump() for s in a.symptoms])
    if a.medications:
        st.subheader("Medications mentioned")
        st.table([m.model_dump() for m in a.medications])
    vit = a.vitals.to_json()
    if vit:
        st.subheader("Vitals mentioned")
        st.json(vit)
    if ai.recommendations:
        st.subheader("Recommendations")
        st.markdown("\n".join(f"- {r}" for r in ai.recommendations))


def render_vitals_analysis(a: VitalsAnalysis) -> None:
    st.markdown(f"**Risk level:** {LEVEL_BADGE[a.risk_level]} {a.risk_level}  \n**Source:** {a.source}")
    st.write(a.summary)
    st.subheader("Insights")
    st.markdown("\n".join(f"- {i}" for i in a.insights))
    st.subheader("Recommendations")
    st.markdown("\n".join(f"- {r}" for r in a.recommendations))


def vitals_form_to_dict(sbp, dbp, bpm, temp, temp_unit, weight, weight_unit) -> Dict[str, Any]:
    # 0 means "not entered"; clean_vitals drops empty sub-objects
    return {
        "bloodPressure": {"systolic": sbp, "diastolic": dbp},
        "heartRate": {"bpm": bpm},
        "temperature": {"value": temp, "unit": temp_unit},
        "weight": {"value": weight, "unit": weight_unit},
    }


# =========================
# Sidebar config
# =========================
llm_settings = load_llm_settings()
storage = load_storage_settings()
llm = LLMClient(llm_settings)

st.sidebar.header("⚙️ Settings & Status")
st.sidebar.write("LLM provider:", llm_settings.provider)
st.sidebar.write("Model:", llm_settings.model_name)
if llm.has_credentials:
    st.sidebar.success("API key configured")
else:
    st.sidebar.warning("No API key: rule-based analysis only")
st.sidebar.write("Storage:", storage.mode)
owner_raw = st.sidebar.text_input("User ID")
anonymize = st.sidebar.checkbox("Anonymize user ID", value=True)
save = st.sidebar.checkbox("Save records", value=False)


# =========================
# Title
# =========================
st.markdown("# 🩺 Voice Health Log")
st.caption("Educational demo. Not medical advice. Contact a clinician or emergency services when in doubt.")

tab_transcript, tab_vitals = st.tabs(["🎙️ Transcript", "💓 Vitals"])


# =========================
# Transcript
# =========================
with tab_transcript:
    with st.form("transcript_form"):
        transcript = st.text_area("What did you say? (speech-to-text output or typed notes)", height=150)
        submitted_t = st.form_submit_button("Analyze transcript")

    if submitted_t:
        if not transcript.strip():
            st.error("Please enter a transcript.")
        else:
            with st.spinner("Analyzing..."):
                result = TranscriptAnalyzer(llm).analyze(transcript)
            render_transcript_analysis(result)
            if save:
                _save(_owner_id(owner_raw, anonymize), {"transcript": transcript}, result)


# =========================
# Vitals
# =========================
with tab_vitals:
    with st.form("vitals_form"):
        c1, c2, c3, c4 = st.columns(4)
        with c1:
            sbp = st.number_input("Systolic (mmHg)", min_value=0, max_value=300, step=1)
            dbp = st.number_input("Diastolic (mmHg)", min_value=0, max_value=200, step=1)
        with c2:
            bpm = st.number_input("Heart rate (bpm)", min_value=0, max_value=300, step=1)
        with c3:
            temp = st.number_input("Temperature", min_value=0.0, max_value=115.0, step=0.1)
            temp_unit = st.selectbox("Unit", ["celsius", "fahrenheit"])
        with c4:
            weight = st.number_input("Weight", min_value=0.0, max_value=1000.0, step=0.1)
            weight_unit = st.selectbox("Weight unit", ["kg", "lbs"])
        submitted_v = st.form_submit_button("Analyze vitals")

    if submitted_v:
        snapshot = clean_vitals(vitals_form_to_dict(sbp, dbp, bpm, temp, temp_unit, weight, weight_unit))
        if snapshot.is_empty():
            st.error("Please provide at least one vital sign.")
        else:
            with st.spinner("Analyzing..."):
                result = VitalsAnalyzer(llm).analyze(snapshot)
            render_vitals_analysis(result)
            if save:
                _save(_owner_id(owner_raw, anonymize), snapshot, result)
