# llm/llm_client.py
import logging
from typing import Optional

import requests

from utils.settings import LLMSettings, load_llm_settings

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


class LLMError(Exception):
    """Any failure to obtain model text: missing key, transport, timeout, empty reply."""


def has_credentials(llm) -> bool:
    # stubs without the attribute are treated as configured
    return llm is not None and bool(getattr(llm, "has_credentials", True))


class LLMClient:
    def __init__(self, settings: Optional[LLMSettings] = None):
        self.settings = settings or load_llm_settings()
        self.provider = self.settings.provider
        self.timeout = self.settings.timeout_seconds

    @property
    def has_credentials(self) -> bool:
        return bool(self.settings.api_key)

    def generate(self, prompt: str, model: Optional[str] = None) -> str:
        model = model or self.settings.model_name
        if self.provider == "gemini":
            return self._gemini_generate(prompt, model)
        elif self.provider == "openai":
            return self._openai_generate(prompt, model)
        raise LLMError(f"Unknown provider: {self.provider}")

    def _gemini_generate(self, prompt: str, model: str) -> str:
        if not self.settings.gemini_api_key:
            raise LLMError("Missing GEMINI_API_KEY")
        try:
            import google.generativeai as genai
            genai.configure(api_key=self.settings.gemini_api_key)

            gmodel = genai.GenerativeModel(
                model_name=model,
                generation_config={
                    "temperature": 0.2,
                    "response_mime_type": "application/json",
                },
            )
            resp = gmodel.generate_content(prompt, request_options={"timeout": self.timeout})
        except Exception as e:
            raise LLMError(f"Gemini request failed: {e}") from e

        # resp.text raises when the candidate was blocked or has no parts
        try:
            text = resp.text
        except Exception:
            text = None
        if text and text.strip():
            return text.strip()

        parts = []
        for cand in getattr(resp, "candidates", []) or []:
            content = getattr(cand, "content", None)
            for p in getattr(content, "parts", None) or []:
                t = getattr(p, "text", None)
                if t:
                    parts.append(t)
        if parts:
            return "\n".join(parts).strip()

        raise LLMError("Empty response from Gemini")

    def _openai_generate(self, prompt: str, model: str) -> str:
        if not self.settings.openai_api_key:
            raise LLMError("Missing OPENAI_API_KEY")
        headers = {
            "Authorization": f"Bearer {self.settings.openai_api_key}",
            "Content-Type": "application/json",
        }
        data = {
            "model": model,
            "messages": [
                {
                    "role": "system",
                    "content": "You are a careful health-logging assistant producing non-diagnostic, structured JSON annotations.",
                },
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.2,
        }
        try:
            r = requests.post(OPENAI_URL, headers=headers, json=data, timeout=self.timeout)
            r.raise_for_status()
            content = r.json()["choices"][0]["message"]["content"]
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError(f"OpenAI request failed: {e}") from e
        if not content or not str(content).strip():
            raise LLMError("Empty response from OpenAI")
        return str(content)
