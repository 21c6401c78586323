# utils/settings.py
import logging
import os
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

Provider = Literal["gemini", "openai"]

DEFAULT_MODELS = {"gemini": "gemini-1.5-flash", "openai": "gpt-4o-mini"}
DEFAULT_TIMEOUT_SECONDS = 20.0


class LLMSettings(BaseModel):
    provider: Provider = "gemini"
    gemini_api_key: str = ""
    openai_api_key: str = ""
    model: Optional[str] = None
    timeout_seconds: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)

    @property
    def api_key(self) -> str:
        return self.gemini_api_key if self.provider == "gemini" else self.openai_api_key

    @property
    def model_name(self) -> str:
        return self.model or DEFAULT_MODELS[self.provider]


class StorageSettings(BaseModel):
    mode: Literal["sqlite", "csv"] = "sqlite"
    db_path: str = "health_records.db"
    csv_path: str = "health_records.csv"


def _streamlit_section(name: str) -> Mapping[str, Any]:
    try:
        import streamlit as st
        return dict(st.secrets.get(name, {}))
    except Exception as e:
        # no secrets.toml, or running outside a Streamlit session
        logger.debug("Streamlit secrets unavailable (%s); using environment only", e)
        return {}


def _timeout(value: Any) -> float:
    try:
        t = float(value)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_SECONDS
    return t if t > 0 else DEFAULT_TIMEOUT_SECONDS


def load_llm_settings(secrets: Optional[Mapping[str, Any]] = None,
                      env: Optional[Mapping[str, str]] = None) -> LLMSettings:
    cfg = _streamlit_section("api") if secrets is None else secrets
    env = os.environ if env is None else env

    provider = str(cfg.get("provider") or env.get("LLM_PROVIDER", "gemini")).strip().lower()
    if provider not in DEFAULT_MODELS:
        logger.warning("Unknown LLM provider %r; using gemini", provider)
        provider = "gemini"

    return LLMSettings(
        provider=provider,
        gemini_api_key=cfg.get("gemini_api_key") or env.get("GEMINI_API_KEY", ""),
        openai_api_key=cfg.get("openai_api_key") or env.get("OPENAI_API_KEY", ""),
        model=cfg.get("model") or env.get("LLM_MODEL") or None,
        timeout_seconds=_timeout(cfg.get("timeout_seconds") or env.get("LLM_TIMEOUT_SECONDS")),
    )


def load_storage_settings(secrets: Optional[Mapping[str, Any]] = None) -> StorageSettings:
    cfg = _streamlit_section("storage") if secrets is None else secrets
    return StorageSettings(**{k: v for k, v in cfg.items() if k in StorageSettings.model_fields})
