"""Minimal smoke tests for API service."""


def test_health_endpoint_returns_ok() -> None:
    # Import inside the test to ensure environment variables are already set
    from fastapi.testclient import TestClient
    from linedesk_api.main import app

    with TestClient(app) as client:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


def test_request_id_is_echoed(client) -> None:
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert client.get("/health").headers["X-Request-ID"]


def test_admin_requires_bearer_token(client) -> None:
    assert client.get("/admin/").status_code == 401
    assert client.get("/admin/", headers={"Authorization": "Bearer wrong"}).status_code == 401
    allowed = client.get("/admin/", headers={"Authorization": "Bearer dev"})
    assert allowed.status_code == 200
