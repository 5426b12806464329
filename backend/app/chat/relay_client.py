import logging
from abc import ABC, abstractmethod

import httpx

from app.agent.errors import RelayUpstreamError, error_from_response
from app.agent.llm_client import LLMClient
from app.agent.relay import MentorChatRequest, ProjectContext, handle_chat_request

logger = logging.getLogger(__name__)


class RelayClient(ABC):
    """How a conversation session reaches the mentor relay."""

    @abstractmethod
    async def send(
        self,
        *,
        conversation_id: str | None,
        mentor_id: str,
        message: str,
        project_context: ProjectContext | None = None,
    ) -> str:
        """Return the mentor's reply text or raise a RelayError."""
        pass


class LocalRelayClient(RelayClient):
    """Calls the relay in-process."""

    def __init__(self, llm: LLMClient | None = None):
        self.llm = llm

    async def send(
        self,
        *,
        conversation_id: str | None,
        mentor_id: str,
        message: str,
        project_context: ProjectContext | None = None,
    ) -> str:
        request = MentorChatRequest(
            conversation_id=conversation_id,
            mentor_id=mentor_id,
            message=message,
            project_context=project_context,
        )
        result = await handle_chat_request(request, llm=self.llm)
        return result.response


class HttpRelayClient(RelayClient):
    """Calls a deployed relay endpoint (`POST .../mentor-chat/`) over HTTP."""

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self.url = url
        self.headers = headers or {}
        self.client = client
        self.timeout = timeout

    async def _post(self, body: dict) -> httpx.Response:
        if self.client is not None:
            return await self.client.post(self.url, json=body, headers=self.headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.url, json=body, headers=self.headers)

    async def send(
        self,
        *,
        conversation_id: str | None,
        mentor_id: str,
        message: str,
        project_context: ProjectContext | None = None,
    ) -> str:
        body = MentorChatRequest(
            conversation_id=conversation_id,
            mentor_id=mentor_id,
            message=message,
            project_context=project_context,
        ).model_dump(by_alias=True, exclude_none=True)

        try:
            response = await self._post(body)
        except httpx.HTTPError as e:
            logger.error("Mentor relay request failed: %s", e)
            raise RelayUpstreamError() from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_success and isinstance(payload, dict) and isinstance(payload.get("response"), str):
            return payload["response"]
        if response.is_success:
            logger.error("Mentor relay returned an unexpected body: %s", response.text)
            raise RelayUpstreamError()

        logger.error("Mentor relay responded with status %s", response.status_code)
        raise error_from_response(response.status_code, payload if isinstance(payload, dict) else None)
