"""
Mentor chat relay.

Turns one user message plus optional project context into a single completion
request against the AI gateway. The relay is stateless: `conversationId` is
accepted for the caller's bookkeeping but prior turns are never fetched, so the
model only sees the mentor prompt, the project context and the current message.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field

from app.agent import mentors
from app.agent.errors import RelayConfigError, RelayInputError
from app.agent.llm_client import LLMClient
from app.core.config import settings

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm here to help! Could you please rephrase your question?"
NOT_SPECIFIED = "Not specified"


class ProjectContext(BaseModel):
    idea: str | None = None
    stage: str | None = None
    industry: str | None = None


class MentorChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str | None = Field(default=None, alias="conversationId")
    mentor_id: str | None = Field(default=None, alias="mentorId")
    message: str | None = None
    project_context: ProjectContext | None = Field(default=None, alias="projectContext")


class MentorChatResponse(BaseModel):
    response: str


def build_context_block(project_context: ProjectContext | None) -> str:
    if project_context is None:
        return ""
    return (
        "\nProject Context:\n"
        f"- Idea: {project_context.idea or NOT_SPECIFIED}\n"
        f"- Stage: {project_context.stage or NOT_SPECIFIED}\n"
        f"- Industry: {project_context.industry or NOT_SPECIFIED}\n"
        "\nUser question:"
    )


def compose_messages(
    system_prompt: str, message: str, project_context: ProjectContext | None = None
) -> list[dict[str, str]]:
    """Build the two-entry (system, user) message list sent to the gateway."""
    context_block = build_context_block(project_context)
    user_content = f"{context_block}\n{message}" if context_block else message
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]


async def handle_chat_request(
    request: MentorChatRequest, llm: LLMClient | None = None
) -> MentorChatResponse:
    """
    Relay one mentor chat turn.

    Raises RelayInputError before any outbound call when mentorId or message is
    missing, RelayConfigError when no gateway key is configured, and the
    upstream RelayError subclasses raised by the LLM client otherwise.
    """
    if not request.mentor_id or not request.message:
        raise RelayInputError()

    if not settings.LLM_API_KEY:
        raise RelayConfigError()
    if llm is None:
        llm = LLMClient()

    system_prompt = mentors.lookup(request.mentor_id)
    messages = compose_messages(system_prompt, request.message, request.project_context)

    logger.info(
        "Relaying mentor chat turn (mentor=%s, conversation=%s)",
        request.mentor_id,
        request.conversation_id,
    )
    reply = await llm.complete(messages)
    return MentorChatResponse(response=reply or FALLBACK_REPLY)
