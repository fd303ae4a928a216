"""Perplexity Sonar client backed by the OpenAI SDK."""

from __future__ import annotations

import asyncio

import httpx
from openai import APIStatusError, APITimeoutError, AsyncOpenAI
from openai import APIError as OpenAIError

from ...core.config import BridgeSettings
from ...core.logging_config import get_logger
from ..schemas.completion import CompletionBody, ProviderResponse

logger = get_logger(__name__)

DEFAULT_MODEL = "sonar"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000


class PerplexityClient:
    """Thin wrapper around the OpenAI-compatible Perplexity chat API.

    Every failure mode (timeout, non-2xx status, connection error, a body that
    does not match ``CompletionBody``) comes back as ``success=False`` so the
    caller never has to tell a refusal apart from a broken transport.
    """

    def __init__(
        self,
        settings: BridgeSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = settings.request_timeout
        base_url = str(settings.perplexity_api_base).rstrip("/")
        logger.info(
            "perplexity_client_init",
            base_url=base_url,
            api_key_masked=settings.masked_api_key(),
            timeout=self._timeout,
        )
        self._client = AsyncOpenAI(
            api_key=settings.perplexity_api_key.get_secret_value(),
            base_url=base_url,
            timeout=self._timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def ask(
        self,
        prompt: str,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> ProviderResponse:
        """Send one user prompt and normalise whatever comes back."""

        logger.info(
            "perplexity_request",
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            prompt_preview=prompt[:80],
        )

        try:
            raw = await asyncio.wait_for(
                self._client.chat.completions.with_raw_response.create(
                    model=model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self._timeout,
            )
            body = CompletionBody.model_validate(raw.http_response.json())
        except (asyncio.TimeoutError, APITimeoutError):
            message = f"Perplexity API request timed out after {self._timeout:g}s"
            logger.error("perplexity_timeout", timeout=self._timeout)
            return ProviderResponse.failure(message)
        except APIStatusError as exc:
            detail = exc.message
            if isinstance(exc.body, dict) and exc.body.get("message"):
                detail = str(exc.body["message"])
            logger.error("perplexity_status_error", status_code=exc.status_code, message=detail)
            return ProviderResponse.failure(
                f"Perplexity API error (status {exc.status_code}): {detail}"
            )
        except OpenAIError as exc:
            logger.error(
                "perplexity_sdk_error",
                error_type=type(exc).__name__,
                message=str(exc),
            )
            return ProviderResponse.failure(f"Perplexity API error: {exc}")
        except ValueError as exc:
            logger.error("perplexity_malformed_response", message=str(exc))
            return ProviderResponse.failure(f"Malformed response from Perplexity API: {exc}")

        response = ProviderResponse.from_body(body)
        logger.info(
            "perplexity_response",
            model=response.model,
            citations=len(response.citations),
            total_tokens=response.usage.total_tokens if response.usage else None,
        )
        return response

    async def aclose(self) -> None:
        await self._client.close()
