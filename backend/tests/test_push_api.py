"""API tests for /api/push/*."""
import pytest

SUBSCRIBE_URL = "/api/push/subscribe"
UNSUBSCRIBE_URL = "/api/push/unsubscribe"


class TestUnsubscribe:

    def test_unknown_endpoint_is_success(self, client, push_store):
        response = client.post(UNSUBSCRIBE_URL, json={"subscription": {"endpoint": "https://x"}})

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_existing_endpoint_is_removed(self, client, push_store):
        push_store.rows["https://push.example/abc"] = {"keys": None, "user_id": "U1", "user_agent": None}

        response = client.post(UNSUBSCRIBE_URL, json={"subscription": {"endpoint": "https://push.example/abc"}})

        assert response.status_code == 200
        assert push_store.rows == {}

    def test_get_is_405(self, client):
        response = client.get(UNSUBSCRIBE_URL)

        assert response.status_code == 405
        assert response.json() == {"success": False, "error": "Method Not Allowed"}

    @pytest.mark.parametrize("body", [{}, {"subscription": {}}, {"subscription": {"endpoint": ""}}, {"subscription": None}])
    def test_missing_fields_is_400(self, client, body):
        response = client.post(UNSUBSCRIBE_URL, json=body)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Missing subscription"}

    def test_empty_body_is_400(self, client):
        response = client.post(UNSUBSCRIBE_URL)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing subscription"

    def test_malformed_json_is_400_with_parse_error(self, client):
        response = client.post(
            UNSUBSCRIBE_URL,
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"].startswith("Expecting value")

    def test_store_error_is_passed_through(self, client, push_store):
        push_store.fail_with = "relation \"push_subscriptions\" does not exist"

        response = client.post(UNSUBSCRIBE_URL, json={"subscription": {"endpoint": "https://x"}})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "relation \"push_subscriptions\" does not exist",
        }


class TestSubscribe:

    def test_subscribe_upserts_by_endpoint(self, client, push_store):
        body = {
            "subscription": {"endpoint": "https://push.example/abc", "keys": {"p256dh": "k1", "auth": "a1"}},
            "userAgent": "Firefox",
            "userId": "U1",
        }

        assert client.post(SUBSCRIBE_URL, json=body).json() == {"success": True}
        body["subscription"]["keys"] = {"p256dh": "k2", "auth": "a2"}
        assert client.post(SUBSCRIBE_URL, json=body).status_code == 200

        assert list(push_store.rows) == ["https://push.example/abc"]
        assert push_store.rows["https://push.example/abc"] == {
            "keys": {"p256dh": "k2", "auth": "a2"},
            "user_id": "U1",
            "user_agent": "Firefox",
        }

    def test_subscribe_without_endpoint_is_400(self, client, push_store):
        response = client.post(SUBSCRIBE_URL, json={"subscription": {"keys": {}}})

        assert response.status_code == 400
        assert push_store.rows == {}

    def test_put_is_405(self, client):
        response = client.put(SUBSCRIBE_URL, json={})

        assert response.status_code == 405

    def test_health(self, client):
        assert client.get("/health").json() == {"ok": True}
