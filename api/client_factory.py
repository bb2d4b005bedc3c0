from config.config import Config, LLMProviderType
from utils.logger import get_logger

from .base_client import BaseLLMClient

logger = get_logger(__name__)


def create_llm_client(config: Config) -> BaseLLMClient | None:
    """
    Build the synthesis client selected by LLM_PROVIDER.

    Returns None when the provider's key is missing; answers then come from
    the template fallback.

    Raises:
        ValueError: for an unsupported LLM_PROVIDER
    """
    provider = config.LLM_PROVIDER

    if provider == LLMProviderType.GEMINI.value:
        if not config.GEMINI_API_KEY:
            logger.warning("GEMINI_API_KEY not set; LLM synthesis disabled")
            return None
        from api.google_gemini_client import GeminiClient

        client = GeminiClient(api_key=config.GEMINI_API_KEY, model_name=config.GEMINI_MODEL)

    elif provider == LLMProviderType.OPENAI.value:
        if not config.OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY not set; LLM synthesis disabled")
            return None
        from api.openai_client import OpenAIClient

        client = OpenAIClient(api_key=config.OPENAI_API_KEY, model_name=config.OPENAI_MODEL)

    else:
        raise ValueError(f"Unsupported LLM_PROVIDER: {provider}")

    logger.info(
        "Initialized client",
        extra={"extra_fields": {"provider": provider, "model": client.model_name}},
    )
    return client
