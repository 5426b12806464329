import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


class MentorId(str, Enum):
    strategist = "strategist"
    tech = "tech"
    validation = "validation"
    growth = "growth"
    branding = "branding"
    fundraising = "fundraising"
    operations = "operations"


class ProjectStage(str, Enum):
    idea = "idea"
    validation = "validation"
    mvp = "mvp"
    traction = "traction"


class TeamSize(str, Enum):
    solo = "solo"
    small = "small"
    medium = "medium"


class TechKnowledge(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class MessageRole(str, Enum):
    user = "user"
    assistant = "assistant"


# Options offered by the onboarding wizard; industry itself stays free text.
INDUSTRIES = (
    "SaaS",
    "E-commerce",
    "FinTech",
    "HealthTech",
    "EdTech",
    "MarketPlace",
    "AI/ML",
    "Other",
)


# Project: the startup profile captured during onboarding
class ProjectBase(SQLModel):
    idea: str = Field(default="")
    stage: ProjectStage = Field(default=ProjectStage.idea)
    industry: str | None = Field(default=None, max_length=255)
    target_customer: str | None = Field(default=None)
    team_size: TeamSize = Field(default=TeamSize.solo)
    tech_knowledge: TechKnowledge = Field(default=TechKnowledge.beginner)
    traction_metrics: str | None = Field(default=None)


class ProjectCreate(ProjectBase):
    pass


class Project(ProjectBase, table=True):
    __tablename__ = "projects"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(index=True, nullable=False)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    conversations: list["Conversation"] = Relationship(
        back_populates="project", cascade_delete=True
    )


class ProjectPublic(ProjectBase):
    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime | None = None


# Conversation: one thread per (project, mentor) pair
class ConversationBase(SQLModel):
    mentor_id: MentorId
    title: str = Field(max_length=255)


class ConversationCreate(ConversationBase):
    project_id: uuid.UUID


class Conversation(ConversationBase, table=True):
    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("project_id", "mentor_id", name="uq_conversation_project_mentor"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    project_id: uuid.UUID = Field(
        foreign_key="projects.id", nullable=False, ondelete="CASCADE"
    )
    project: Project | None = Relationship(back_populates="conversations")
    messages: list["ChatMessage"] = Relationship(
        back_populates="conversation", cascade_delete=True
    )


class ConversationPublic(ConversationBase):
    id: uuid.UUID
    project_id: uuid.UUID
    created_at: datetime | None = None


# Chat messages are immutable once written
class ChatMessageBase(SQLModel):
    role: MessageRole
    content: str


class ChatMessageCreate(ChatMessageBase):
    conversation_id: uuid.UUID
    client_key: uuid.UUID | None = None


class ChatMessage(ChatMessageBase, table=True):
    __tablename__ = "messages"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        index=True,
    )
    conversation_id: uuid.UUID = Field(
        foreign_key="conversations.id", nullable=False, ondelete="CASCADE", index=True
    )
    # Client-generated idempotency key used to merge local and live-feed rows.
    client_key: uuid.UUID | None = Field(default=None, unique=True)
    conversation: Conversation | None = Relationship(back_populates="messages")


class ChatMessagePublic(ChatMessageBase):
    id: uuid.UUID
    conversation_id: uuid.UUID
    client_key: uuid.UUID | None = None
    created_at: datetime | None = None
