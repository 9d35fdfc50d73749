import structlog
from django.http import HttpRequest, HttpResponse
from django.test import RequestFactory

from common.middleware import StructlogContextMiddleware


def test_request_context_is_bound_and_id_echoed() -> None:
    seen: dict[str, object] = {}

    def view(request: HttpRequest) -> HttpResponse:
        seen.update(structlog.contextvars.get_contextvars())
        return HttpResponse()

    request = RequestFactory().get(
        "/api/version", HTTP_X_REQUEST_ID="req-1", HTTP_X_FORWARDED_FOR="10.0.0.1, 10.0.0.2"
    )

    response = StructlogContextMiddleware(view)(request)

    assert response["X-Request-ID"] == "req-1"
    assert seen["request_id"] == "req-1"
    assert seen["ip_address"] == "10.0.0.1"
    assert seen["path"] == "/api/version"
    assert structlog.contextvars.get_contextvars() == {}


def test_request_id_is_generated() -> None:
    request = RequestFactory().get("/")

    response = StructlogContextMiddleware(lambda r: HttpResponse())(request)

    assert response["X-Request-ID"]
