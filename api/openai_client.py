import openai

from models.errors import LLMGenerationError

from .base_client import BaseLLMClient


class OpenAIClient(BaseLLMClient):
    """
    A client for the OpenAI chat completions API.

    OpenAI has no top-k sampling parameter, so ``top_k`` is accepted and ignored.
    """

    provider_name = "openai"

    def __init__(self, api_key: str, model_name: str = "gpt-4o-mini", **kwargs):
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.client = openai.OpenAI(api_key=api_key)

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
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_output_tokens,
            )
        except openai.AuthenticationError as e:
            raise LLMGenerationError(
                "OpenAI rejected the API key", provider=self.provider_name, retryable=False
            ) from e
        except Exception as e:
            raise LLMGenerationError(
                f"OpenAI request failed: {type(e).__name__}: {e}", provider=self.provider_name
            ) from e

        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            raise LLMGenerationError("OpenAI returned an empty response", provider=self.provider_name)
        return text
