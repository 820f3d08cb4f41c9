import json

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from http_api_problem import ApiError, ProblemDetails, StatusCode, api_error
from http_api_problem.gateway import create_problem_response, register_problem_handlers


@api_error(404, title="Order missing")
class OrderNotFound(LookupError):
    pass


@pytest.fixture
def client() -> TestClient:
    app = register_problem_handlers(FastAPI())

    @app.get("/api-error")
    async def raise_api_error():
        raise ApiError(422, title="You do not have enough credit.", message="Balance is 30").set_extension(
            "balance", 30
        )

    @app.get("/http-error")
    async def raise_http_error():
        raise HTTPException(status_code=404, detail="Order 17 does not exist")

    @app.get("/orders/{order_id}")
    async def get_order(order_id: int):
        return {"order_id": order_id}

    return TestClient(app)


def test_create_problem_response_uses_problem_status_and_media_type():
    response = create_problem_response(ProblemDetails.with_title_and_type_from_status(404))

    assert response.status_code == 404
    assert response.media_type == "application/problem+json"
    assert json.loads(response.body) == {
        "type": "https://httpstatuses.com/404",
        "title": "Not Found",
        "status": 404,
    }


def test_create_problem_response_falls_back_to_configured_status(monkeypatch):
    problem = ProblemDetails.empty().set_title("Something broke")

    assert create_problem_response(problem).status_code == 500
    assert create_problem_response(problem, fallback_status=503).status_code == 503

    monkeypatch.setenv("HTTP_API_PROBLEM_FALLBACK_STATUS", "502")
    from http_api_problem.config.settings import get_settings

    get_settings.cache_clear()
    response = create_problem_response(problem)
    assert response.status_code == 502
    assert "status" not in json.loads(response.body)


def test_create_problem_response_accepts_convertibles():
    response = create_problem_response(ApiError(409, title="Conflict"))
    assert response.status_code == 409

    response = create_problem_response(StatusCode(410))
    assert json.loads(response.body) == {"type": "about:blank", "status": 410}


def test_retry_after_extension_becomes_header():
    problem = ProblemDetails.new(429).set_extension("retry_after", 12.5)
    response = create_problem_response(problem)
    assert response.headers["retry-after"] == "12"


def test_api_error_handler(client: TestClient):
    with capture_logs() as logs:
        response = client.get("/api-error")

    assert response.status_code == 422
    assert response.headers["content-type"] == "application/problem+json"
    assert response.json() == {
        "type": "about:blank",
        "title": "You do not have enough credit.",
        "status": 422,
        "detail": "Balance is 30",
        "balance": 30,
    }
    assert logs[0]["event"] == "problem.response"
    assert logs[0]["path"] == "/api-error"


def test_http_exception_handler(client: TestClient):
    response = client.get("/http-error")

    assert response.status_code == 404
    assert response.json() == {
        "type": "https://httpstatuses.com/404",
        "title": "Not Found",
        "status": 404,
        "detail": "Order 17 does not exist",
    }


def test_unknown_route_returns_problem(client: TestClient):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.headers["content-type"] == "application/problem+json"
    assert "detail" not in response.json()


def test_validation_error_handler(client: TestClient):
    response = client.get("/orders/not-a-number")

    body = response.json()
    assert response.status_code == 422
    assert body["title"] == "Unprocessable Entity"
    assert body["detail"] == "One or more parameters are invalid."
    assert body["errors"][0]["loc"] == ["path", "order_id"]


def test_decorated_exception_converted_in_route():
    app = register_problem_handlers(FastAPI())

    @app.get("/orders/{order_id}")
    async def get_order(order_id: int):
        try:
            raise OrderNotFound(f"order {order_id}")
        except OrderNotFound as exc:
            raise ApiError.from_error(exc) from exc

    response = TestClient(app).get("/orders/17")
    assert response.status_code == 404
    assert response.json()["detail"] == "order 17"


def test_route_returning_problem_details_renders_the_problem_document():
    app = FastAPI()
    problem = ProblemDetails.with_title_and_type_from_status(409).set_extension("conflicting_id", 17)

    @app.get("/typed", response_model=ProblemDetails)
    async def typed():
        return problem

    @app.get("/untyped")
    async def untyped():
        return problem

    client = TestClient(app)
    assert client.get("/typed").json() == problem.to_dict()
    assert client.get("/untyped").json() == problem.to_dict()
