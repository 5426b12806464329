import logging

import openai
from openai import AsyncOpenAI

from app.agent.errors import RelayQuotaError, RelayRateLimitError, RelayUpstreamError
from app.core.config import settings

logger = logging.getLogger(__name__)


def _response_body(error: openai.APIStatusError) -> str:
    try:
        return error.response.text
    except Exception:  # body may already be consumed or unreadable
        return str(error.body)


class LLMClient:
    """Chat completion client for the mentor gateway (OpenAI-compatible chat completions API)."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT

        resolved_api_key = api_key or settings.LLM_API_KEY
        resolved_base_url = base_url or settings.LLM_BASE_URL

        # The relay performs exactly one outbound call per turn, so SDK retries are disabled.
        self.client = AsyncOpenAI(
            base_url=resolved_base_url,
            api_key=resolved_api_key,
            max_retries=0,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    async def complete(self, messages: list[dict[str, str]]) -> str | None:
        """
        Issue a single non-streaming chat completion.
        Returns the first choice's text, or None when the provider sent no usable text.
        Upstream failures are raised as RelayError subclasses.
        """
        try:
            logger.info("Issuing mentor chat request to model %s...", self.model_name)
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
            )
        except openai.RateLimitError as e:
            logger.warning("AI gateway rate limited the request (status %s)", e.status_code)
            raise RelayRateLimitError() from e
        except openai.APIStatusError as e:
            if e.status_code == 402:
                logger.warning("AI gateway reports exhausted credits (status 402)")
                raise RelayQuotaError() from e
            logger.error("AI gateway error: %s %s", e.status_code, _response_body(e))
            raise RelayUpstreamError() from e
        except openai.APIError as e:
            logger.error("Error calling AI gateway: %s", e)
            raise RelayUpstreamError() from e

        choices = getattr(response, "choices", None)
        if not choices:
            logger.warning("Received 0 choices from %s: %s", self.model_name, response)
            return None

        message = getattr(choices[0], "message", None)
        text_response = getattr(message, "content", None)
        if not isinstance(text_response, str) or not text_response.strip():
            logger.warning("Model %s returned empty content", self.model_name)
            return None

        logger.info("Successfully received mentor reply from %s.", self.model_name)
        return text_response
