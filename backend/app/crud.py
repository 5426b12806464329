import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from app.agent.mentors import default_conversation_title
from app.models import (
    ChatMessage,
    ChatMessageCreate,
    Conversation,
    ConversationCreate,
    MentorId,
    Project,
    ProjectCreate,
)

logger = logging.getLogger(__name__)


def create_project(*, session: Session, project_in: ProjectCreate, user_id: uuid.UUID) -> Project:
    db_project = Project.model_validate(project_in, update={"user_id": user_id})
    session.add(db_project)
    session.commit()
    session.refresh(db_project)
    return db_project


def get_active_project(*, session: Session, user_id: uuid.UUID) -> Project | None:
    """The most recently created project is the user's active one."""
    statement = (
        select(Project)
        .where(Project.user_id == user_id)
        .order_by(col(Project.created_at).desc())
        .limit(1)
    )
    return session.exec(statement).first()


def get_conversation(
    *, session: Session, project_id: uuid.UUID, mentor_id: MentorId
) -> Conversation | None:
    statement = select(Conversation).where(
        Conversation.project_id == project_id,
        Conversation.mentor_id == mentor_id,
    )
    return session.exec(statement).first()


def create_conversation(*, session: Session, conversation_in: ConversationCreate) -> Conversation:
    """
    Insert a conversation. When another caller already created the
    (project, mentor) pair, the unique constraint fires and the existing row is returned.
    """
    db_conversation = Conversation.model_validate(conversation_in)
    session.add(db_conversation)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        existing = get_conversation(
            session=session,
            project_id=conversation_in.project_id,
            mentor_id=conversation_in.mentor_id,
        )
        if existing is None:
            raise
        logger.info(
            "Conversation for project %s and mentor %s already exists, reusing %s",
            conversation_in.project_id,
            conversation_in.mentor_id.value,
            existing.id,
        )
        return existing
    session.refresh(db_conversation)
    return db_conversation


def get_or_create_conversation(
    *, session: Session, project_id: uuid.UUID, mentor_id: MentorId
) -> Conversation:
    existing = get_conversation(session=session, project_id=project_id, mentor_id=mentor_id)
    if existing:
        return existing
    return create_conversation(
        session=session,
        conversation_in=ConversationCreate(
            project_id=project_id,
            mentor_id=mentor_id,
            title=default_conversation_title(mentor_id),
        ),
    )


def create_message(*, session: Session, message_in: ChatMessageCreate) -> ChatMessage:
    db_message = ChatMessage.model_validate(message_in)
    session.add(db_message)
    session.commit()
    session.refresh(db_message)
    return db_message


def list_messages(*, session: Session, conversation_id: uuid.UUID) -> list[ChatMessage]:
    statement = (
        select(ChatMessage)
        .where(ChatMessage.conversation_id == conversation_id)
        .order_by(col(ChatMessage.created_at).asc())
    )
    return list(session.exec(statement).all())
