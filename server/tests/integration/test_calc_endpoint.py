from fastapi.testclient import TestClient

from webcalc.main import create_app


def create_test_client() -> TestClient:
    app = create_app()
    return TestClient(app)


def test_calc_endpoint_returns_result_for_valid_expression() -> None:
    client = create_test_client()

    response = client.get("/calc", params={"query": "2+3*4"})

    assert response.status_code == 200
    assert response.json() == {
        "expression": "2+3*4",
        "type": "Combine",
        "result": 20.0,
    }
    assert response.headers["X-Request-ID"]


def test_calc_endpoint_serializes_nan() -> None:
    client = create_test_client()

    response = client.get("/calc", params={"query": "0/0"})

    assert response.status_code == 200
    assert response.json()["result"] == "NaN"


def test_calc_endpoint_returns_error_for_invalid_expression() -> None:
    client = create_test_client()

    response = client.get("/calc", params={"query": "abc"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"]["type"] == "EXPRESSION_PARSE_ERROR"
    assert "invalid character" in payload["error"]["message"].lower()
    assert payload["error"]["traceId"] == response.headers["X-Request-ID"]


def test_calc_endpoint_requires_query_param() -> None:
    client = create_test_client()

    response = client.get("/calc")

    assert response.status_code == 422
