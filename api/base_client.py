from abc import ABC, abstractmethod


class BaseLLMClient(ABC):
    """
    Abstract base class for answer-synthesis model clients.

    Clients are synchronous; the synthesizer runs them in an executor under
    its own timeout. Any failure, including an empty completion, is raised as
    LLMGenerationError so the fallback chain can take over.
    """

    provider_name: str = "unknown"

    def __init__(self, api_key: str, model_name: str | None = None, **kwargs):
        """
        Initialize the LLM client.

        Args:
            api_key: API key for the model service
            model_name: Model identifier
            **kwargs: Additional model-specific parameters
        """
        if not api_key:
            raise ValueError(f"API key is required for {self.provider_name}")
        self.api_key = api_key
        self.model_name = model_name

    @abstractmethod
    def generate(
        self,
        prompt: str,
        *,
        max_output_tokens: int,
        temperature: float,
        top_p: float,
        top_k: int,
    ) -> str:
        """
        Generate a completion for ``prompt``.

        Returns:
            The generated text, never empty

        Raises:
            LLMGenerationError: on SDK errors or empty output
        """
