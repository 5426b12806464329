import asyncio
import logging
import uuid

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app import crud
from app.models import (
    ChatMessageCreate,
    ChatMessagePublic,
    ConversationPublic,
    MentorId,
    MessageRole,
    ProjectCreate,
    ProjectPublic,
)
from app.realtime import MessageFeed, Subscription, MessageCallback

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A read or write against the persistent store failed."""


class MentorStore:
    """
    Awaitable access to projects, conversations and messages.

    Each call runs in a worker thread with its own Session. Inserted messages are
    published to the change feed from the caller's event loop once committed.
    """

    def __init__(self, engine: Engine, feed: MessageFeed | None = None):
        self.engine = engine
        self.feed = feed or MessageFeed()

    async def _run(self, operation: str, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            logger.error("Store operation %s failed: %s", operation, e)
            raise StoreError(f"Failed to {operation}") from e

    def _create_project(self, user_id: uuid.UUID, project_in: ProjectCreate) -> ProjectPublic:
        with Session(self.engine) as session:
            project = crud.create_project(session=session, project_in=project_in, user_id=user_id)
            return ProjectPublic.model_validate(project)

    def _get_active_project(self, user_id: uuid.UUID) -> ProjectPublic | None:
        with Session(self.engine) as session:
            project = crud.get_active_project(session=session, user_id=user_id)
            return ProjectPublic.model_validate(project) if project else None

    def _get_or_create_conversation(
        self, project_id: uuid.UUID, mentor_id: MentorId
    ) -> ConversationPublic:
        with Session(self.engine) as session:
            conversation = crud.get_or_create_conversation(
                session=session, project_id=project_id, mentor_id=mentor_id
            )
            return ConversationPublic.model_validate(conversation)

    def _list_messages(self, conversation_id: uuid.UUID) -> list[ChatMessagePublic]:
        with Session(self.engine) as session:
            rows = crud.list_messages(session=session, conversation_id=conversation_id)
            return [ChatMessagePublic.model_validate(row) for row in rows]

    def _create_message(self, message_in: ChatMessageCreate) -> ChatMessagePublic:
        with Session(self.engine) as session:
            row = crud.create_message(session=session, message_in=message_in)
            return ChatMessagePublic.model_validate(row)

    async def create_project(self, user_id: uuid.UUID, project_in: ProjectCreate) -> ProjectPublic:
        project = await self._run("create project", self._create_project, user_id, project_in)
        logger.info("Created project %s for user %s", project.id, user_id)
        return project

    async def get_active_project(self, user_id: uuid.UUID) -> ProjectPublic | None:
        return await self._run("load project", self._get_active_project, user_id)

    async def get_or_create_conversation(
        self, project_id: uuid.UUID, mentor_id: MentorId
    ) -> ConversationPublic:
        return await self._run(
            "load conversation", self._get_or_create_conversation, project_id, mentor_id
        )

    async def list_messages(self, conversation_id: uuid.UUID) -> list[ChatMessagePublic]:
        return await self._run("load messages", self._list_messages, conversation_id)

    async def add_message(
        self,
        conversation_id: uuid.UUID,
        role: MessageRole,
        content: str,
        client_key: uuid.UUID | None = None,
    ) -> ChatMessagePublic:
        message_in = ChatMessageCreate(
            conversation_id=conversation_id,
            role=role,
            content=content,
            client_key=client_key,
        )
        message = await self._run("save message", self._create_message, message_in)
        self.feed.publish(message)
        return message

    def subscribe(self, conversation_id: uuid.UUID, callback: MessageCallback) -> Subscription:
        return self.feed.subscribe(conversation_id, callback)
