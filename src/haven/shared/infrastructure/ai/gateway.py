"""
Generation gateway boundary for Haven.

The core hands a context bundle and an instruction to a GenerationGateway and
receives raw text back. Retries, timeouts and model selection live behind this
boundary. GeminiGateway is the production implementation.
"""

import threading
from abc import ABC, abstractmethod
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional

import google.generativeai as genai
from pydantic import Field

from ...config.settings import get_settings
from ...exceptions import AIError, ConfigurationError
from ...models.base import BaseModel
from ..monitoring.logger import get_logger


class ResponseFormat(str, Enum):
    """Requested shape of the generation output."""
    TEXT = "text"
    JSON = "json"


class GenerationRequest(BaseModel):
    """Request sent to the generation gateway."""

    instruction: str = Field(..., description="What the generator should do")
    context_bundle: str = Field(default="", description="Serialized graph context")
    response_format: ResponseFormat = Field(default=ResponseFormat.TEXT, description="Expected output format")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Caller tags, not sent to the model")

    def to_prompt(self) -> str:
        """Join instruction and context into a single prompt string."""
        if not self.context_bundle:
            return self.instruction
        return f"{self.instruction}\n\n{self.context_bundle}"


class GenerationGateway(ABC):
    """Abstract boundary to a text generation service."""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        """
        Produce raw text for a request.

        Raises:
            AIError: when the upstream call fails
        """
        pass


class GeminiGateway(GenerationGateway):
    """
    Generation gateway backed by Google Gemini.

    JSON requests set the response MIME type so the model emits bare JSON,
    though callers still scan the reply for the object.
    """

    _configure_lock = threading.Lock()

    def __init__(self,
                 api_key: Optional[str] = None,
                 model_name: Optional[str] = None,
                 temperature: Optional[float] = None,
                 max_tokens: Optional[int] = None):
        self.logger = get_logger(__name__)
        settings = get_settings()

        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is required for GeminiGateway")

        self.model_name = model_name or settings.default_llm_model
        self.temperature = settings.generation_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.generation_max_tokens

        try:
            with self._configure_lock:
                genai.configure(api_key=api_key)
            self._model = genai.GenerativeModel(model_name=self.model_name)
        except Exception as e:
            raise ConfigurationError(f"Failed to initialize Gemini: {e}")

        self.logger.info(f"Gemini gateway ready with model {self.model_name}")

    async def generate(self, request: GenerationRequest) -> str:
        config_kwargs: Dict[str, Any] = {
            'max_output_tokens': self.max_tokens,
            'temperature': self.temperature,
        }
        if request.response_format == ResponseFormat.JSON:
            config_kwargs['response_mime_type'] = "application/json"

        try:
            response = await self._model.generate_content_async(
                request.to_prompt(),
                generation_config=genai.types.GenerationConfig(**config_kwargs),
            )
            text = response.text
        except Exception as e:
            raise AIError(f"Text generation failed: {e}")

        if not text or not text.strip():
            raise AIError("Empty response from model")

        return text.strip()


@lru_cache()
def get_generation_gateway() -> GenerationGateway:
    """
    Get the process-wide gateway built from settings.

    Returns:
        GeminiGateway configured from the environment
    """
    return GeminiGateway()
