# src/pageindex_sdk/llm.py

import logging
from time import monotonic

from openai import AsyncOpenAI

from pageindex_sdk.exceptions import LLMError
from pageindex_sdk.observability import names
from pageindex_sdk.observability.base import MetricsHook, NoOpMetricsHook

logger = logging.getLogger(__name__)


async def call_llm(
    prompt: str,
    api_key: str | None = None,
    model: str = "gpt-4.1",
    temperature: float = 0.0,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> str:
    """Send a single user prompt to an OpenAI model and return the reply.

    Used for auxiliary processing of retrieved sections. No retries: OpenAI
    errors propagate to the caller.

    Args:
        prompt: The user message.
        api_key: OpenAI key. Falls back to OPENAI_API_KEY.
        model: Model name.
        temperature: Sampling temperature (0.0 = deterministic).
        metrics_hook: Optional metrics hook for observability.

    Returns:
        The reply text, stripped.

    Raises:
        LLMError: If the model returns no content.
    """
    client = AsyncOpenAI(api_key=api_key)
    start = monotonic()
    logger.debug("Calling OpenAI: model=%s, prompt_chars=%d", model, len(prompt))

    response = await client.chat.completions.create(
        model=model,
        temperature=temperature,
        messages=[{"role": "user", "content": prompt}],
    )

    elapsed_ms = 1000 * (monotonic() - start)
    labels = {"provider": "openai", "model": model}
    metrics_hook.record_latency(names.LLM_COMPLETION_DURATION, elapsed_ms, labels=labels)
    metrics_hook.increment(names.LLM_REQUESTS_TOTAL, labels=labels)
    if response.usage is not None:
        metrics_hook.increment(names.LLM_TOKENS_TOTAL, response.usage.total_tokens)

    content = response.choices[0].message.content if response.choices else None
    if not content:
        logger.error("LLM returned empty content: model=%s", model)
        raise LLMError("LLM returned empty content")

    logger.info("OpenAI completion: model=%s, latency=%.0fms", model, elapsed_ms)
    return content.strip()
