from google import genai
from google.genai import errors as genai_errors

from models.errors import LLMGenerationError
from utils.logger import get_logger

from .base_client import BaseLLMClient

logger = get_logger(__name__)


def _is_auth_error(error: genai_errors.ClientError) -> bool:
    # Google returns 400 API_KEY_INVALID for a malformed key, 401/403 otherwise.
    return error.code in (401, 403) or "API key not valid" in (error.message or "")


class GeminiClient(BaseLLMClient):
    """
    A client for the Google Gemini API using the google.genai package.
    """

    provider_name = "gemini"

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-pro", **kwargs):
        """
        Initialize the Gemini client.

        Args:
            api_key: The Google Gemini API key
            model_name: The name of the model to use (default: gemini-2.5-pro)
        """
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.client = genai.Client(api_key=api_key)

    def generate(
        self,
        prompt: str,
        *,
        max_output_tokens: int = 4000,
        temperature: float = 0.2,
        top_p: float = 0.9,
        top_k: int = 40,
    ) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config={
                    "max_output_tokens": max_output_tokens,
                    "temperature": temperature,
                    "top_p": top_p,
                    "top_k": top_k,
                },
            )
        except Exception as e:
            if isinstance(e, genai_errors.ClientError) and _is_auth_error(e):
                raise LLMGenerationError(
                    "Gemini rejected the API key", provider=self.provider_name, retryable=False
                ) from e
            raise LLMGenerationError(
                f"Gemini request failed: {type(e).__name__}: {e}", provider=self.provider_name
            ) from e

        text = getattr(response, "text", None)
        if not text or not text.strip():
            raise LLMGenerationError("Gemini returned an empty response", provider=self.provider_name)

        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            logger.debug(
                "Gemini usage",
                extra={
                    "extra_fields": {
                        "model": self.model_name,
                        "prompt_tokens": getattr(usage, "prompt_token_count", 0),
                        "completion_tokens": getattr(usage, "candidates_token_count", 0),
                    }
                },
            )
        return text
