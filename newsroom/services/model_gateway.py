import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from google import genai
from google.genai import errors
from google.genai import types

from ..errors import ConfigurationError, GatewayExhaustedError

logger = logging.getLogger(__name__)

QUOTA_EXCEEDED_MESSAGE = "AI quota exceeded. Please wait a minute and try again."


@dataclass
class GenerationProfile:
    """Model ladder and sampling settings for one call purpose."""
    purpose: str
    models: List[str] = field(default_factory=list)
    temperature: float = 0.7
    max_output_tokens: int = 4096

    @classmethod
    def from_config(cls, purpose, settings):
        return cls(
            purpose=purpose,
            models=list(settings.get('models', [])),
            temperature=float(settings.get('temperature', 0.7)),
            max_output_tokens=int(settings.get('max_output_tokens', 4096)),
        )


class ModelGateway:
    """
    Calls the Gemini text-generation endpoint, walking the purpose's model
    ladder until one model answers.
    """

    def __init__(self, api_key, profiles, timeout_ms=60000, client=None):
        self.api_key = api_key
        self.timeout_ms = timeout_ms
        self.profiles = {
            purpose: GenerationProfile.from_config(purpose, settings)
            for purpose, settings in profiles.items()
        }
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self):
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=self.timeout_ms),
            )
        return self._client

    def profile(self, purpose) -> GenerationProfile:
        try:
            return self.profiles[purpose]
        except KeyError:
            raise ConfigurationError(f"No generation profile configured for '{purpose}'")

    def generate(self, prompt: str, purpose: str) -> str:
        """
        Returns the raw text of the first successful model. Each model is tried
        once; any failure moves on to the next one.
        """
        if not self.configured:
            raise ConfigurationError("AI API key not configured")

        profile = self.profile(purpose)
        if not profile.models:
            raise ConfigurationError(f"No models configured for '{purpose}'")

        generation_config = types.GenerateContentConfig(
            temperature=profile.temperature,
            max_output_tokens=profile.max_output_tokens,
        )

        attempts = []
        last_error: Optional[Exception] = None
        for model in profile.models:
            attempts.append(model)
            try:
                response = self.client.models.generate_content(
                    model=model,
                    contents=prompt,
                    config=generation_config,
                )
            except errors.APIError as e:
                last_error = e
                logger.warning(f"{purpose}: Model {model} failed ({e.code}), trying next...")
                continue
            except httpx.HTTPError as e:
                last_error = e
                logger.warning(f"{purpose}: Model {model} failed ({type(e).__name__}: {e}), trying next...")
                continue

            text = response.text or ''
            logger.info(f"{purpose}: Model {model} answered with {len(text)} characters")
            return text

        logger.error(f"{purpose}: All models failed ({', '.join(attempts)}). Last error: {last_error}")
        raise GatewayExhaustedError(QUOTA_EXCEEDED_MESSAGE, attempts=attempts, last_error=last_error)
