"""
Conversation synchronizer for one (project, mentor) chat view.

Keeps a local, ordered transcript consistent with the store and drives the
turn protocol: save the user message, ask the relay, save the mentor reply.
Rows reach the transcript through two paths (direct append after a write and
the live change feed); both are merged on row id and client key.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from app.agent.errors import RelayError
from app.agent.mentors import Mentor, get_mentor
from app.agent.relay import ProjectContext
from app.chat.relay_client import RelayClient
from app.models import ChatMessagePublic, MentorId, MessageRole, ProjectPublic
from app.realtime import Subscription
from app.store import MentorStore, StoreError

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RESOLVING = "resolving"
    READY = "ready"
    CLOSED = "closed"


class OnboardingRequired(Exception):
    """The user has no project yet and must go through onboarding first."""


@dataclass(frozen=True)
class Notice:
    title: str
    description: str


class ConversationSession:
    def __init__(
        self,
        store: MentorStore,
        relay: RelayClient,
        *,
        user_id: uuid.UUID,
        mentor_id: str | MentorId | None = None,
        notify: Callable[[Notice], None] | None = None,
    ):
        self.store = store
        self.relay = relay
        self.user_id = user_id
        self.mentor: Mentor = get_mentor(mentor_id)
        self.notify = notify

        self.state = SessionState.UNINITIALIZED
        self.project: ProjectPublic | None = None
        self.conversation_id: uuid.UUID | None = None
        self.messages: list[ChatMessagePublic] = []
        self.draft = ""
        self.sending = False
        self.notices: list[Notice] = []

        self._subscription: Subscription | None = None
        self._seen_ids: set[uuid.UUID] = set()
        self._seen_keys: set[uuid.UUID] = set()

    @property
    def mentor_id(self) -> MentorId:
        return self.mentor.id

    async def __aenter__(self) -> "ConversationSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _notify(self, title: str, description: str) -> None:
        notice = Notice(title=title, description=description)
        self.notices.append(notice)
        if self.notify is not None:
            self.notify(notice)

    def _append(self, message: ChatMessagePublic) -> bool:
        if message.id in self._seen_ids:
            return False
        if message.client_key is not None and message.client_key in self._seen_keys:
            return False
        self._seen_ids.add(message.id)
        if message.client_key is not None:
            self._seen_keys.add(message.client_key)
        self.messages.append(message)
        return True

    def _on_live_message(self, message: ChatMessagePublic) -> None:
        # Live rows are appended in arrival order; no re-sort.
        self._append(message)

    async def open(self) -> None:
        """
        Resolve the active project and this mentor's conversation, load the
        history and start listening for new rows.
        Raises OnboardingRequired when the user has no project.
        """
        if self.state != SessionState.UNINITIALIZED:
            return
        self.state = SessionState.RESOLVING

        try:
            project = await self.store.get_active_project(self.user_id)
        except StoreError as e:
            logger.error("Error loading project: %s", e)
            self._notify("Error", "Failed to load project")
            self.state = SessionState.READY
            return

        if project is None:
            self.state = SessionState.UNINITIALIZED
            raise OnboardingRequired(f"User {self.user_id} has no project")
        self.project = project

        try:
            conversation = await self.store.get_or_create_conversation(project.id, self.mentor_id)
        except StoreError as e:
            logger.error("Error loading conversation: %s", e)
            self._notify("Error", "Failed to load project")
            self.state = SessionState.READY
            return

        self.conversation_id = conversation.id
        self._subscription = self.store.subscribe(conversation.id, self._on_live_message)
        await self._load_history()
        self.state = SessionState.READY

    async def _load_history(self) -> None:
        assert self.conversation_id is not None
        try:
            history = await self.store.list_messages(self.conversation_id)
        except StoreError as e:
            logger.error("Error loading messages: %s", e)
            self._notify("Error", "Failed to load messages")
            return

        # Rows that arrived on the feed while history was loading go after it.
        live = self.messages
        self.messages = []
        self._seen_ids.clear()
        self._seen_keys.clear()
        for message in [*history, *live]:
            self._append(message)

    def project_context(self) -> ProjectContext | None:
        if self.project is None:
            return None
        return ProjectContext(
            idea=self.project.idea,
            stage=self.project.stage.value if self.project.stage else None,
            industry=self.project.industry,
        )

    async def send(self, text: str | None = None) -> bool:
        """
        Run one turn. Returns False without side effects when there is nothing
        to send, no conversation, or another send is still in flight.
        """
        content = (self.draft if text is None else text).strip()
        if (
            not content
            or self.sending
            or self.state != SessionState.READY
            or self.conversation_id is None
        ):
            return False

        self.sending = True
        try:
            user_message = await self.store.add_message(
                self.conversation_id, MessageRole.user, content, client_key=uuid.uuid4()
            )
            self._append(user_message)
            self.draft = ""

            reply = await self.relay.send(
                conversation_id=str(self.conversation_id),
                mentor_id=self.mentor_id.value,
                message=content,
                project_context=self.project_context(),
            )

            assistant_message = await self.store.add_message(
                self.conversation_id, MessageRole.assistant, reply, client_key=uuid.uuid4()
            )
            self._append(assistant_message)
            return True
        except (StoreError, RelayError) as e:
            logger.error("Error sending message: %s", e)
            self._notify("Error", str(e) or "Failed to send message")
            return False
        finally:
            self.sending = False

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        self.state = SessionState.CLOSED
