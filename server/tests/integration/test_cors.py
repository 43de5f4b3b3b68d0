from fastapi.testclient import TestClient

from webcalc.core.config import get_settings
from webcalc.main import create_app


def preflight(client: TestClient, origin: str):
    return client.options(
        "/calculations/history",
        headers={
            "Origin": origin,
            "Access-Control-Request-Method": "GET",
        },
    )


def test_cors_allows_configured_origin() -> None:
    client = TestClient(create_app())

    response = preflight(client, "http://localhost:5173")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_cors_allows_frontend_origin(monkeypatch) -> None:
    monkeypatch.setenv("FRONTEND_ORIGIN", "https://calc.example.com/")
    get_settings.cache_clear()
    try:
        client = TestClient(create_app())
        response = preflight(client, "https://calc.example.com")
    finally:
        get_settings.cache_clear()

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://calc.example.com"


def test_cors_rejects_unknown_origin() -> None:
    client = TestClient(create_app())

    response = preflight(client, "https://evil.example.com")

    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers
