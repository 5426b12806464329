from fastapi import APIRouter

from app.api.routes import mentor_chat, mentors, utils

api_router = APIRouter()
api_router.include_router(utils.router, tags=["utils"])
api_router.include_router(mentors.router, prefix="/mentors", tags=["mentors"])
api_router.include_router(mentor_chat.router, prefix="/mentor-chat", tags=["mentor-chat"])
