"""
Tests for the HTTP handlers: branch order, status mapping, CORS, envelopes.

The gateway dependency is overridden with a real GatewayClient whose
requests.Session is mocked, so the whole request path runs except the network.
"""
import base64
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.gateway import GatewayClient, get_gateway_client

from tests.helpers import chat_text_body, make_response, primary_image_body

AUTH = {"Authorization": "Bearer user-token"}
DESIGN_BODY = {
    "imageData": "data:image/png;base64,AAAA",
    "style": "Modern",
    "roomType": "Living Room",
    "editMode": False,
}


@pytest.fixture
def use_config(http_session):
    """Install a GatewayClient built from the given settings."""
    def install(config):
        app.dependency_overrides[get_gateway_client] = lambda: GatewayClient(config, session=http_session)
    yield install
    app.dependency_overrides.clear()


@pytest.fixture
def client(use_config, config):
    use_config(config)
    return TestClient(app)


def assert_cors(response):
    assert response.headers["access-control-allow-origin"] == "*"
    assert "authorization" in response.headers["access-control-allow-headers"]


class TestGenerateRoomDesign:

    def test_success_scenario(self, client, http_session):
        http_session.post.return_value = make_response(
            200, primary_image_body("data:image/png;base64,ZZZZ")
        )

        response = client.post("/generate-room-design", json=DESIGN_BODY, headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {
            "image": "data:image/png;base64,ZZZZ",
            "message": "Design generated successfully",
        }
        assert response.headers["content-type"].startswith("application/json")
        assert_cors(response)

    def test_prompt_reaches_gateway(self, client, http_session):
        http_session.post.return_value = make_response(200, primary_image_body("data:image/png;base64,ZZZZ"))

        client.post("/generate-room-design", json={**DESIGN_BODY, "description": "Add plants"}, headers=AUTH)

        text = http_session.post.call_args.kwargs["json"]["messages"][0]["content"][0]["text"]
        assert text.startswith("Transform this empty room into a beautifully designed Modern style Living Room. Add plants. ")

    def test_edit_mode_uses_edit_prompt(self, client, http_session):
        http_session.post.return_value = make_response(200, primary_image_body("data:image/png;base64,EDIT"))
        body = {"imageData": "data:image/png;base64,AAAA", "editMode": True, "editPrompt": "Paint the walls white"}

        response = client.post("/generate-room-design", json=body, headers=AUTH)

        assert response.status_code == 200
        text = http_session.post.call_args.kwargs["json"]["messages"][0]["content"][0]["text"]
        assert text.startswith("Modify this room design: Paint the walls white.")

    def test_payment_required_without_fallback_scenario(self, client, http_session):
        http_session.post.return_value = make_response(402, "credits exhausted")

        response = client.post("/generate-room-design", json=DESIGN_BODY, headers=AUTH)

        assert response.status_code == 402
        assert response.json()["error"].startswith("AI credits exhausted and no fallback configured")
        assert http_session.post.call_count == 1
        assert_cors(response)

    def test_payment_required_with_fallback(self, use_config, config_with_fallback, http_session, png_bytes):
        use_config(config_with_fallback)
        http_session.post.side_effect = [
            make_response(402),
            make_response(200, {"data": [{"b64_json": "RkFMTEJBQ0s="}]}),
        ]
        body = {**DESIGN_BODY, "imageData": f"data:image/png;base64,{base64.b64encode(png_bytes).decode()}"}

        response = TestClient(app).post("/generate-room-design", json=body, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["image"] == "data:image/png;base64,RkFMTEJBQ0s="
        assert http_session.post.call_count == 2

    def test_payment_required_with_undecodable_photo(self, use_config, config_with_fallback, http_session):
        use_config(config_with_fallback)
        http_session.post.side_effect = [
            make_response(402),
            make_response(200, {"data": [{"b64_json": "QUJD"}]}),
        ]

        response = TestClient(app).post("/generate-room-design", json=DESIGN_BODY, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["image"] == "data:image/png;base64,QUJD"
        assert http_session.post.call_count == 2

    def test_unexpected_error_is_500_with_cors(self):
        gateway = MagicMock()
        gateway.generate_room_image.side_effect = RuntimeError("kaboom")
        app.dependency_overrides[get_gateway_client] = lambda: gateway
        try:
            response = TestClient(app, raise_server_exceptions=False).post(
                "/generate-room-design", json=DESIGN_BODY, headers=AUTH
            )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {
            "error": "kaboom",
            "details": "Please try again or contact support if the issue persists",
        }
        assert_cors(response)

    def test_rate_limited(self, client, http_session):
        http_session.post.return_value = make_response(429)

        response = client.post("/generate-room-design", json=DESIGN_BODY, headers=AUTH)

        assert response.status_code == 429
        assert response.json() == {"error": "Rate limit exceeded. Please try again later."}
        assert http_session.post.call_count == 1

    def test_upstream_error_is_500(self, client, http_session):
        http_session.post.return_value = make_response(500, "internal")

        response = client.post("/generate-room-design", json=DESIGN_BODY, headers=AUTH)

        assert response.status_code == 500
        assert "AI Gateway error: 500" in response.json()["error"]

    def test_missing_image_in_success_is_500(self, client, http_session):
        http_session.post.return_value = make_response(200, {"choices": [{"message": {"content": "text only"}}]})

        response = client.post("/generate-room-design", json=DESIGN_BODY, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "No image generated from AI response"}

    def test_missing_authorization(self, client, http_session):
        response = client.post("/generate-room-design", json=DESIGN_BODY)

        assert response.status_code == 401
        assert "error" in response.json()
        assert_cors(response)
        http_session.post.assert_not_called()

    def test_auth_is_checked_before_body(self, client):
        response = client.post(
            "/generate-room-design", content="{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 401

    def test_malformed_json(self, client, http_session):
        response = client.post(
            "/generate-room-design",
            content="{not json",
            headers={**AUTH, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}
        http_session.post.assert_not_called()

    def test_validation_failure_has_details(self, client, http_session):
        body = {k: v for k, v in DESIGN_BODY.items() if k != "style"}

        response = client.post("/generate-room-design", json=body, headers=AUTH)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Invalid request"
        assert data["details"][0]["message"] == "style and roomType are required unless editMode is true"
        http_session.post.assert_not_called()

    def test_missing_primary_key(self, use_config, config, http_session):
        config.lovable_api_key = ""
        use_config(config)

        response = TestClient(app).post("/generate-room-design", json=DESIGN_BODY, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "AI service not configured"}

    def test_preflight(self, client):
        response = client.options("/generate-room-design")

        assert response.status_code == 200
        assert response.content == b""
        assert_cors(response)

    def test_browser_preflight(self, client):
        response = client.options(
            "/generate-room-design",
            headers={"Origin": "https://app.example.com", "Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


class TestRecommendations:

    BODY = {"roomType": "Bedroom", "style": "Scandinavian", "budget": "3000", "preferences": "pet friendly"}

    def test_success(self, client, http_session):
        http_session.post.return_value = make_response(200, chat_text_body("1. Color palette: ..."))

        response = client.post("/ai-design-recommendations", json=self.BODY)

        assert response.status_code == 200
        assert response.json() == {"recommendation": "1. Color palette: ...", "model": "google/gemini-2.5-flash"}
        assert_cors(response)

        payload = http_session.post.call_args.kwargs["json"]
        assert payload["model"] == "google/gemini-2.5-flash"
        assert "- Additional Preferences: pet friendly" in payload["messages"][1]["content"]

    def test_model_preference(self, client, http_session):
        http_session.post.return_value = make_response(200, chat_text_body("plan"))

        response = client.post("/ai-design-recommendations", json={**self.BODY, "modelPreference": "gpt-pro"})

        assert response.json()["model"] == "openai/gpt-5"

    def test_no_authorization_required(self, client, http_session):
        http_session.post.return_value = make_response(200, chat_text_body("plan"))
        assert client.post("/ai-design-recommendations", json=self.BODY).status_code == 200

    @pytest.mark.parametrize("status", [402, 429])
    def test_upstream_status_is_mapped(self, client, http_session, status):
        http_session.post.return_value = make_response(status)

        response = client.post("/ai-design-recommendations", json=self.BODY)

        assert response.status_code == status
        assert "error" in response.json()

    def test_invalid_budget(self, client, http_session):
        response = client.post("/ai-design-recommendations", json={**self.BODY, "budget": "lots"})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "budget"
        http_session.post.assert_not_called()

    def test_preflight(self, client):
        response = client.options("/ai-design-recommendations")
        assert response.status_code == 200
        assert_cors(response)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
