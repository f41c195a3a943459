"""LLM Client Package"""

from gac.llm.base import (
    LLMClient, LLMResponse, LLMError, SYSTEM_PROMPT, parse_candidates, validate_candidates,
)
from gac.llm.anthropic import AnthropicClient
from gac.llm.gemini import GeminiClient
from gac.llm.ollama import OllamaClient
from gac.llm.openai import OpenAIClient

ENGINES = {
    "ollama": OllamaClient,
    "openai": OpenAIClient,
    "anthropic": AnthropicClient,
    "gemini": GeminiClient,
}


def get_client(engine: str, model: str | None = None, api_key: str | None = None) -> LLMClient:
    """Get an LLM client for one of the network engines."""
    if engine not in ENGINES:
        raise LLMError(f"Unknown engine: {engine}. Use {', '.join(ENGINES)} or none.")

    if engine == "ollama":
        return OllamaClient(model=model)
    return ENGINES[engine](api_key=api_key, model=model)


__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMError",
    "AnthropicClient",
    "GeminiClient",
    "OllamaClient",
    "OpenAIClient",
    "get_client",
    "ENGINES",
    "SYSTEM_PROMPT",
    "parse_candidates",
    "validate_candidates",
]
