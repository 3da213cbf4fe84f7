"""Integration tests for the chat-platform webhook acknowledger"""

from fastapi.testclient import TestClient

from factories import ANON_KEY, BACKEND_URL
from outbehaving.api.main import create_app
from outbehaving.config import Settings

VERIFY = {"hub.mode": "subscribe", "hub.verify_token": "abc123", "hub.challenge": "CHALLENGE_ACCEPTED"}


def test_verification_echoes_challenge(client: TestClient):
    response = client.get("/webhook", params=VERIFY)

    assert response.status_code == 200
    assert response.text == "CHALLENGE_ACCEPTED"


def test_verification_wrong_token(client: TestClient):
    response = client.get("/webhook", params={**VERIFY, "hub.verify_token": "wrong"})

    assert response.status_code == 403
    assert response.text == "Verification failed"


def test_verification_wrong_mode(client: TestClient):
    response = client.get("/webhook", params={**VERIFY, "hub.mode": "unsubscribe"})
    assert response.status_code == 403


def test_verification_missing_parameters(client: TestClient):
    assert client.get("/webhook").status_code == 403


def test_verification_rejected_when_no_token_configured(backend_config):
    settings = Settings(supabase_url=BACKEND_URL, supabase_anon_key=ANON_KEY, webhook_verify_token=None)
    client = TestClient(create_app(settings=settings, backend_config=backend_config))

    assert client.get("/webhook", params=VERIFY).status_code == 403


def test_event_is_acknowledged(client: TestClient):
    response = client.post("/webhook", json={"object": "page", "entry": [{"id": "1", "messaging": []}]})

    assert response.status_code == 200
    assert response.text == "EVENT_RECEIVED"


def test_invalid_json_is_still_acknowledged(client: TestClient):
    response = client.post("/webhook", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 200
    assert response.text == "EVENT_RECEIVED"


def test_other_methods_are_not_allowed(client: TestClient):
    for method in ("PUT", "PATCH", "DELETE"):
        response = client.request(method, "/webhook")

        assert response.status_code == 405
        assert response.text == "Method Not Allowed"
        assert response.headers["allow"] == "GET, POST"
