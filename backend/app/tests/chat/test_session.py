import asyncio
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from app.agent.errors import RelayRateLimitError
from app.chat.relay_client import RelayClient
from app.chat.session import ConversationSession, OnboardingRequired, SessionState
from app.models import MentorId, MessageRole
from app.store import StoreError


class FakeRelay(RelayClient):
    def __init__(self, reply="Interview ten tutors first.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def send(self, *, conversation_id, mentor_id, message, project_context=None):
        self.calls.append(
            {
                "conversation_id": conversation_id,
                "mentor_id": mentor_id,
                "message": message,
                "project_context": project_context,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


class BlockingRelay(FakeRelay):
    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def send(self, **kwargs):
        self.started.set()
        await self.release.wait()
        return await super().send(**kwargs)


@pytest_asyncio.fixture
async def project(store, user_id, project_in):
    return await store.create_project(user_id, project_in)


@pytest.mark.asyncio
async def test_open_without_project_requires_onboarding(store, user_id):
    session = ConversationSession(store, FakeRelay(), user_id=user_id, mentor_id="tech")

    with pytest.raises(OnboardingRequired):
        await session.open()

    assert session.conversation_id is None


@pytest.mark.asyncio
async def test_open_resolves_conversation_and_loads_history(store, user_id, project):
    conversation = await store.get_or_create_conversation(project.id, MentorId.tech)
    await store.add_message(conversation.id, MessageRole.user, "Earlier question")
    await store.add_message(conversation.id, MessageRole.assistant, "Earlier answer")

    async with ConversationSession(store, FakeRelay(), user_id=user_id, mentor_id="tech") as session:
        assert session.state == SessionState.READY
        assert session.conversation_id == conversation.id
        assert [m.content for m in session.messages] == ["Earlier question", "Earlier answer"]
        assert store.feed.subscriber_count(conversation.id) == 1

    assert session.state == SessionState.CLOSED
    assert store.feed.subscriber_count(conversation.id) == 0


@pytest.mark.asyncio
async def test_sessions_for_same_pair_share_one_conversation(store, user_id, project):
    first = ConversationSession(store, FakeRelay(), user_id=user_id, mentor_id="growth")
    second = ConversationSession(store, FakeRelay(), user_id=user_id, mentor_id="growth")
    await first.open()
    await second.open()

    assert first.conversation_id == second.conversation_id


@pytest.mark.asyncio
async def test_unknown_mentor_uses_strategist_conversation(store, user_id, project):
    session = ConversationSession(store, FakeRelay(), user_id=user_id, mentor_id="wizard")
    await session.open()

    assert session.mentor_id == MentorId.strategist


@pytest.mark.asyncio
async def test_send_persists_both_turns_once(store, user_id, project):
    relay = FakeRelay()
    session = ConversationSession(store, relay, user_id=user_id, mentor_id="validation")
    await session.open()
    session.draft = "  How do I find my first customers?  "

    assert await session.send() is True

    assert [(m.role, m.content) for m in session.messages] == [
        (MessageRole.user, "How do I find my first customers?"),
        (MessageRole.assistant, "Interview ten tutors first."),
    ]
    assert session.draft == ""
    assert session.sending is False

    stored = await store.list_messages(session.conversation_id)
    assert [m.id for m in stored] == [m.id for m in session.messages]

    call = relay.calls[0]
    assert call["mentor_id"] == "validation"
    assert call["conversation_id"] == str(session.conversation_id)
    assert call["message"] == "How do I find my first customers?"
    assert call["project_context"].idea == "A marketplace for tutors"
    assert call["project_context"].stage == "mvp"
    assert call["project_context"].industry == "EdTech"


@pytest.mark.asyncio
async def test_rows_from_other_writers_arrive_live(store, user_id, project):
    session = ConversationSession(store, FakeRelay(), user_id=user_id, mentor_id="tech")
    await session.open()

    await store.add_message(session.conversation_id, MessageRole.user, "Sent from another tab")

    assert [m.content for m in session.messages] == ["Sent from another tab"]


@pytest.mark.asyncio
async def test_blank_input_is_ignored(store, user_id, project):
    relay = FakeRelay()
    session = ConversationSession(store, relay, user_id=user_id, mentor_id="tech")
    await session.open()

    assert await session.send("   ") is False
    assert relay.calls == []
    assert session.messages == []


@pytest.mark.asyncio
async def test_send_while_in_flight_is_ignored(store, user_id, project):
    relay = BlockingRelay()
    session = ConversationSession(store, relay, user_id=user_id, mentor_id="tech")
    await session.open()

    first = asyncio.create_task(session.send("First question"))
    await relay.started.wait()

    assert session.sending is True
    assert await session.send("Second question") is False

    relay.release.set()
    assert await first is True

    assert [m.content for m in session.messages] == [
        "First question",
        "Interview ten tutors first.",
    ]
    assert len(relay.calls) == 1


@pytest.mark.asyncio
async def test_relay_failure_keeps_user_turn_and_notifies(store, user_id, project):
    notices = []
    relay = FakeRelay(error=RelayRateLimitError())
    session = ConversationSession(
        store, relay, user_id=user_id, mentor_id="tech", notify=notices.append
    )
    await session.open()
    session.draft = "Will this be rate limited?"

    assert await session.send() is False

    assert [m.role for m in session.messages] == [MessageRole.user]
    assert session.draft == ""
    assert session.sending is False
    assert session.state == SessionState.READY
    assert notices[0].description == "Rate limit exceeded. Please try again later."
    assert len(relay.calls) == 1


@pytest.mark.asyncio
async def test_failed_user_write_keeps_draft(store, user_id, project):
    relay = FakeRelay()
    session = ConversationSession(store, relay, user_id=user_id, mentor_id="tech")
    await session.open()
    session.draft = "Keep me"
    store.add_message = AsyncMock(side_effect=StoreError("Failed to save message"))

    assert await session.send() is False

    assert session.draft == "Keep me"
    assert relay.calls == []
    assert session.notices[-1].description == "Failed to save message"


@pytest.mark.asyncio
async def test_store_failure_while_resolving_leaves_view_usable(store, user_id):
    store.get_active_project = AsyncMock(side_effect=StoreError("Failed to load project"))
    relay = FakeRelay()
    session = ConversationSession(store, relay, user_id=user_id, mentor_id="tech")

    await session.open()

    assert session.state == SessionState.READY
    assert session.conversation_id is None
    assert session.notices[0].description == "Failed to load project"
    assert await session.send("Hello?") is False
    assert relay.calls == []
