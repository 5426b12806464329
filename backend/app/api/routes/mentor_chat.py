import json
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.agent.errors import RelayError
from app.agent.relay import MentorChatRequest, handle_chat_request

router = APIRouter()
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _error_response(error: RelayError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_payload(),
        headers=CORS_HEADERS,
    )


@router.options("/")
async def mentor_chat_preflight() -> Response:
    return Response(headers=CORS_HEADERS)


@router.post("/")
async def mentor_chat(request: Request) -> JSONResponse:
    """
    Relay a single chat turn to the selected mentor.
    Body: {conversationId, mentorId, message, projectContext?}; returns {response}.
    """
    # Parsed by hand: malformed bodies get the relay error shape, not a 422.
    try:
        payload = MentorChatRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        logger.error("Error in mentor-chat: invalid request body: %s", e)
        return _error_response(RelayError("Invalid request body"))

    try:
        result = await handle_chat_request(payload)
    except RelayError as e:
        logger.error("Error in mentor-chat: %s", e.message)
        return _error_response(e)
    except Exception:
        logger.exception("Unexpected error in mentor-chat")
        return _error_response(RelayError())

    return JSONResponse(content=result.model_dump(), headers=CORS_HEADERS)
