from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.agent.errors import RelayQuotaError, RelayRateLimitError, RelayUpstreamError
from app.core.config import settings
from app.main import app

URL = f"{settings.API_V1_STR}/mentor-chat/"


@pytest.fixture
def client():
    # No context manager: the lifespan (database init) is not needed here.
    return TestClient(app)


@pytest.fixture
def fake_llm():
    llm = MagicMock()
    llm.complete = AsyncMock(return_value="Talk to ten customers this week.")
    with patch("app.agent.relay.settings.LLM_API_KEY", "test-key"):
        with patch("app.agent.relay.LLMClient", return_value=llm):
            yield llm


def test_preflight_returns_empty_body_with_cors_headers(client):
    response = client.options(URL)

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "content-type" in response.headers["access-control-allow-headers"]


def test_successful_turn_returns_response(client, fake_llm):
    response = client.post(
        URL,
        json={
            "conversationId": "c-1",
            "mentorId": "validation",
            "message": "How do I validate demand?",
            "projectContext": {"idea": "A marketplace for tutors", "stage": "mvp"},
        },
    )

    assert response.status_code == 200
    assert response.json() == {"response": "Talk to ten customers this week."}
    assert response.headers["access-control-allow-origin"] == "*"
    user_content = fake_llm.complete.await_args.args[0][1]["content"]
    assert "- Industry: Not specified" in user_content
    assert user_content.endswith("User question:\nHow do I validate demand?")


def test_missing_message_is_rejected_without_outbound_call(client, fake_llm):
    response = client.post(URL, json={"conversationId": "c-1", "mentorId": "tech"})

    assert response.status_code == 500
    assert response.json() == {"error": "Missing required fields", "code": "invalid_input"}
    fake_llm.complete.assert_not_called()


def test_malformed_json_is_a_generic_failure(client, fake_llm):
    response = client.post(
        URL, content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 500
    assert "error" in response.json()
    fake_llm.complete.assert_not_called()


def test_missing_key_is_reported_as_configuration_error(client):
    with patch("app.agent.relay.settings.LLM_API_KEY", ""):
        response = client.post(URL, json={"mentorId": "tech", "message": "Hi"})

    assert response.status_code == 500
    assert response.json()["code"] == "config_error"


@pytest.mark.parametrize(
    "error, status_code, code",
    [
        (RelayRateLimitError(), 429, "rate_limited"),
        (RelayQuotaError(), 402, "credits_exhausted"),
        (RelayUpstreamError(), 500, "upstream_error"),
    ],
)
def test_upstream_errors_keep_distinct_statuses(client, fake_llm, error, status_code, code):
    fake_llm.complete.side_effect = error

    response = client.post(URL, json={"mentorId": "tech", "message": "Hi"})

    assert response.status_code == status_code
    assert response.json()["code"] == code
    assert response.headers["access-control-allow-origin"] == "*"
    assert fake_llm.complete.await_count == 1


def test_unexpected_errors_do_not_leak_details(client, fake_llm):
    fake_llm.complete.side_effect = RuntimeError("database password is hunter2")

    response = client.post(URL, json={"mentorId": "tech", "message": "Hi"})

    assert response.status_code == 500
    assert "hunter2" not in response.text


def test_mentor_listing(client):
    response = client.get(f"{settings.API_V1_STR}/mentors/")

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 7
    assert body[0] == {
        "id": "strategist",
        "name": "Startup Strategist",
        "description": "Business model & strategy",
        "icon": "lightbulb",
        "color": "from-blue-500 to-cyan-500",
    }
    assert all("system_prompt" not in mentor for mentor in body)


def test_health_check(client):
    response = client.get(f"{settings.API_V1_STR}/utils/health-check/")
    assert response.status_code == 200
    assert response.json() is True
