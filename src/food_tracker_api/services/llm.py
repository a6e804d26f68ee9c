"""LLM factory for multi-provider support."""

from typing import Any

from langchain_core.language_models import BaseChatModel

from food_tracker_api.core.config import LLMProvider, Settings, get_settings


def get_llm(
    settings: Settings | None = None,
    *,
    timeout: float | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> BaseChatModel:
    """
    Get configured LLM instance based on settings.

    Supports OpenAI and Google Gemini providers. Clients are built without
    automatic retries; a failed call is reported, not repeated.

    Args:
        settings: Application settings (uses default if not provided)
        timeout: Per-request timeout in seconds
        temperature: Overrides settings.llm_temperature
        max_tokens: Cap on generated tokens

    Returns:
        Configured chat model instance

    Raises:
        ValueError: If provider is not configured or unsupported
    """
    if settings is None:
        settings = get_settings()

    if temperature is None:
        temperature = settings.llm_temperature

    match settings.llm_provider:
        case LLMProvider.GEMINI:
            return _get_gemini(settings, timeout, temperature, max_tokens)
        case LLMProvider.OPENAI:
            return _get_openai(settings, timeout, temperature, max_tokens)
        case _:
            raise ValueError(f"Unsupported LLM provider: {settings.llm_provider}")


def _get_openai(
    settings: Settings,
    timeout: float | None,
    temperature: float,
    max_tokens: int | None,
) -> BaseChatModel:
    """Get OpenAI chat model."""
    from langchain_openai import ChatOpenAI

    if not settings.openai_api_key:
        raise ValueError(
            "OpenAI API key not configured. "
            "Set OPENAI_API_KEY in your .env file."
        )

    return ChatOpenAI(
        model=settings.openai_model,
        api_key=settings.openai_api_key,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout,
        max_retries=0,
    )


def _get_gemini(
    settings: Settings,
    timeout: float | None,
    temperature: float,
    max_tokens: int | None,
) -> BaseChatModel:
    """Get Google Gemini chat model."""
    from langchain_google_genai import ChatGoogleGenerativeAI

    if not settings.google_api_key:
        raise ValueError(
            "Google API key not configured. "
            "Set GOOGLE_API_KEY in your .env file."
        )

    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.google_api_key,
        temperature=temperature,
        max_output_tokens=max_tokens,
        timeout=timeout,
        max_retries=0,
    )


def get_llm_info(settings: Settings | None = None) -> dict:
    """
    Get information about the configured LLM.

    Args:
        settings: Application settings

    Returns:
        Dict with provider info
    """
    if settings is None:
        settings = get_settings()

    return {
        "provider": settings.llm_provider.value,
        "model": (
            settings.gemini_model
            if settings.llm_provider == LLMProvider.GEMINI
            else settings.openai_model
        ),
        "configured": settings.is_llm_configured,
        "temperature": settings.llm_temperature,
    }


def response_text(message: Any) -> str:
    """Flatten a chat model reply into plain text."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content or "")


def extract_json(text: str) -> str | None:
    """Extract the first balanced JSON object from a model reply.

    Tolerates prose or markdown fences around the object.
    """
    start = text.find("{")
    if start == -1:
        return None

    # Find the matching end brace
    brace_count = 0
    for i in range(start, len(text)):
        if text[i] == "{":
            brace_count += 1
        elif text[i] == "}":
            brace_count -= 1
            if brace_count == 0:
                return text[start : i + 1]

    return None
