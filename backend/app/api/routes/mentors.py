from typing import Any

from fastapi import APIRouter

from app.agent.mentors import MentorSummary, list_mentors

router = APIRouter()


@router.get("/", response_model=list[MentorSummary])
def read_mentors() -> Any:
    """
    List the available mentors for the dashboard.
    """
    return [MentorSummary.model_validate(m.model_dump()) for m in list_mentors()]
