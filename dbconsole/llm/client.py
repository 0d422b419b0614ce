"""
LLM Client for Google Gemini and Groq.

This module provides one call, generate(prompt, system_prompt), over a
provider cascade:
- Google Gemini first (LLM_MODEL)
- Groq second (LLM_FALLBACK_MODEL)

Providers without an API key are skipped. When every configured
provider fails, LLMError is raised.
"""
import time
from typing import Dict, List, Optional

import google.generativeai as genai
from groq import Groq

from dbconsole.core.config import Settings, get_settings
from dbconsole.core.exceptions import LLMError
from dbconsole.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


class LLMClient:
    """
    Hybrid client for Google Gemini and Groq.

    Features:
    - Automatic fallback (Google -> Groq)
    - Providers only initialized when their key is configured
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

        self.groq_client: Optional[Groq] = None
        if self.settings.groq_api_key:
            self.groq_client = Groq(api_key=self.settings.groq_api_key)

        self.google_enabled = bool(self.settings.google_api_key)
        if self.google_enabled:
            genai.configure(api_key=self.settings.google_api_key)

        self.temperature = self.settings.llm_temperature
        self.max_tokens = self.settings.llm_max_tokens

        logger.info(
            f"LLM Client initialized (google={self.google_enabled}, "
            f"groq={self.groq_client is not None})"
        )

    @property
    def is_configured(self) -> bool:
        return self.google_enabled or self.groq_client is not None

    def _cascade(self) -> List[Dict[str, str]]:
        cascade = []
        if self.google_enabled:
            cascade.append({"provider": "google", "model": self.settings.llm_model})
        if self.groq_client is not None:
            cascade.append({"provider": "groq", "model": self.settings.llm_fallback_model})
        return cascade

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """
        Generate a completion, falling back across providers.

        Raises:
            LLMError: If no provider is configured or all of them failed
        """
        if system_prompt is None:
            system_prompt = DEFAULT_SYSTEM_PROMPT

        cascade = self._cascade()
        if not cascade:
            raise LLMError("No LLM provider configured (set GOOGLE_API_KEY or GROQ_API_KEY)")

        last_error = None
        for i, attempt in enumerate(cascade):
            provider = attempt["provider"]
            target_model = attempt["model"]

            try:
                if i > 0:
                    logger.info(f"Attempt {i+1}: Falling back to {provider.title()} ({target_model})...")
                    time.sleep(1)

                if provider == "google":
                    return self._generate_google(prompt, system_prompt, target_model)
                return self._generate_groq(prompt, system_prompt, target_model)

            except Exception as e:
                error_msg = str(e).lower()
                is_rate_limit = "429" in error_msg or "quota" in error_msg or "rate limit" in error_msg

                log_level = logger.warning if is_rate_limit else logger.error
                log_level(f"Provider failed ({provider}/{target_model}): {e}")
                last_error = e

        logger.critical("All LLM providers failed")
        raise LLMError(f"All LLM providers failed. Last error: {last_error}")

    def _generate_groq(self, prompt: str, system_prompt: str, model: str) -> str:
        """Execute request using Groq."""
        response = self.groq_client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""

    def _generate_google(self, prompt: str, system_prompt: str, model: str) -> str:
        """Execute request using Google Gemini."""
        model_instance = genai.GenerativeModel(
            model_name=model,
            system_instruction=system_prompt,
            generation_config=genai.types.GenerationConfig(
                temperature=self.temperature,
                max_output_tokens=self.max_tokens,
            ),
        )
        response = model_instance.generate_content(prompt)
        return response.text
