"""LLM client utilities for LangChain integration."""

from langchain_openai import ChatOpenAI

from app.core.config import get_settings


def get_llm(model: str | None = None, temperature: float | None = None) -> ChatOpenAI:
    """
    Get configured chat model for LangChain chains.

    Args:
        model: Model name override (defaults to CHAT_MODEL)
        temperature: Temperature override (defaults to CHAT_TEMPERATURE)

    Returns:
        ChatOpenAI instance configured with API key and model
    """
    settings = get_settings()

    return ChatOpenAI(
        api_key=settings.OPENAI_API_KEY,
        model=model or settings.CHAT_MODEL,
        temperature=settings.CHAT_TEMPERATURE if temperature is None else temperature,
    )
