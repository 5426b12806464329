import uuid

import pytest
from sqlmodel import Session, SQLModel, create_engine

from app import models  # noqa: F401
from app.models import ProjectCreate, ProjectStage
from app.store import MentorStore


@pytest.fixture
def engine(tmp_path):
    db_engine = create_engine(
        f"sqlite:///{tmp_path / 'mentor_chat_test.db'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def store(engine):
    return MentorStore(engine)


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def project_in():
    return ProjectCreate(
        idea="A marketplace for tutors",
        stage=ProjectStage.mvp,
        industry="EdTech",
        target_customer="Parents of high-school students",
        traction_metrics="40 paying families",
    )
