import logging
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from app.agent.prompts.mentors import (
    BRANDING_SYSTEM_PROMPT,
    FUNDRAISING_SYSTEM_PROMPT,
    GROWTH_SYSTEM_PROMPT,
    OPERATIONS_SYSTEM_PROMPT,
    STRATEGIST_SYSTEM_PROMPT,
    TECH_SYSTEM_PROMPT,
    VALIDATION_SYSTEM_PROMPT,
)
from app.models import MentorId

logger = logging.getLogger(__name__)

DEFAULT_MENTOR_ID = MentorId.strategist


class Mentor(BaseModel):
    """A preset mentor persona: its system prompt plus dashboard presentation."""

    model_config = ConfigDict(frozen=True)

    id: MentorId
    name: str
    description: str
    system_prompt: str
    icon: str
    color: str


class MentorSummary(BaseModel):
    id: MentorId
    name: str
    description: str
    icon: str
    color: str


MENTORS: MappingProxyType[MentorId, Mentor] = MappingProxyType(
    {
        mentor.id: mentor
        for mentor in (
            Mentor(
                id=MentorId.strategist,
                name="Startup Strategist",
                description="Business model & strategy",
                system_prompt=STRATEGIST_SYSTEM_PROMPT,
                icon="lightbulb",
                color="from-blue-500 to-cyan-500",
            ),
            Mentor(
                id=MentorId.tech,
                name="MVP Tech Mentor",
                description="Technical architecture",
                system_prompt=TECH_SYSTEM_PROMPT,
                icon="code",
                color="from-purple-500 to-pink-500",
            ),
            Mentor(
                id=MentorId.validation,
                name="Market Validation",
                description="Customer research",
                system_prompt=VALIDATION_SYSTEM_PROMPT,
                icon="target",
                color="from-green-500 to-emerald-500",
            ),
            Mentor(
                id=MentorId.growth,
                name="Growth Mentor",
                description="Acquisition & scaling",
                system_prompt=GROWTH_SYSTEM_PROMPT,
                icon="trending-up",
                color="from-orange-500 to-red-500",
            ),
            Mentor(
                id=MentorId.branding,
                name="Branding Expert",
                description="Positioning & messaging",
                system_prompt=BRANDING_SYSTEM_PROMPT,
                icon="palette",
                color="from-pink-500 to-rose-500",
            ),
            Mentor(
                id=MentorId.fundraising,
                name="Fundraising Mentor",
                description="Investment & capital",
                system_prompt=FUNDRAISING_SYSTEM_PROMPT,
                icon="dollar-sign",
                color="from-yellow-500 to-orange-500",
            ),
            Mentor(
                id=MentorId.operations,
                name="Operations Mentor",
                description="Systems & processes",
                system_prompt=OPERATIONS_SYSTEM_PROMPT,
                icon="settings",
                color="from-indigo-500 to-blue-500",
            ),
        )
    }
)


def parse_mentor_id(mentor_id: str | MentorId | None) -> MentorId | None:
    """Return the matching MentorId, or None when the identifier is not a known mentor."""
    if isinstance(mentor_id, MentorId):
        return mentor_id
    try:
        return MentorId(mentor_id)
    except ValueError:
        return None


def get_mentor(mentor_id: str | MentorId | None) -> Mentor:
    """
    Resolve a mentor by identifier.
    Unknown identifiers deliberately resolve to the strategist instead of failing.
    """
    resolved = parse_mentor_id(mentor_id)
    if resolved is None:
        logger.info(
            "Unknown mentor id %r, falling back to %s", mentor_id, DEFAULT_MENTOR_ID.value
        )
        return MENTORS[DEFAULT_MENTOR_ID]
    return MENTORS[resolved]


def lookup(mentor_id: str | MentorId | None) -> str:
    return get_mentor(mentor_id).system_prompt


def list_mentors() -> list[Mentor]:
    return list(MENTORS.values())


def default_conversation_title(mentor_id: str | MentorId | None) -> str:
    return f"{get_mentor(mentor_id).name} Chat"
