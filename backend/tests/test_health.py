from __future__ import annotations


def test_ping(client_no_auth):
    """GET /ping should return 200 with Pong."""
    response = client_no_auth.get("/ping")
    assert response.status_code == 200
    assert response.json() == {"message": "Pong!"}


def test_public_index(client_no_auth):
    response = client_no_auth.get("/public/")
    assert response.status_code == 200
    assert response.json() == {"message": "Public routes accessible without authentication"}


def test_readiness_endpoint(client_no_auth):
    """GET /health/ready should return 200 with status=ready."""
    response = client_no_auth.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_unknown_route_is_404(client_no_auth):
    assert client_no_auth.get("/nope").status_code == 404
