from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from app.core.config import settings

# Importing the models registers their tables on SQLModel.metadata.
from app import models  # noqa: F401


def _connect_args(uri: str) -> dict:
    if uri.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    connect_args=_connect_args(settings.SQLALCHEMY_DATABASE_URI),
)


def init_db(db_engine: Engine | None = None) -> None:
    SQLModel.metadata.create_all(db_engine or engine)
