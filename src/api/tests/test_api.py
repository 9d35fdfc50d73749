"""Tests for the top-level API endpoints and exception handlers."""

import typing as t
import uuid

import orjson
import pytest
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from django.test import RequestFactory
from django.test.client import Client
from django.urls import reverse

from accounts.exceptions import ParticipantNotFoundError
from api.exception_handlers import (
    handle_django_validation_error,
    handle_participant_not_found_error,
    handle_registration_error,
    handle_transaction_conflict_error,
    obfuscate,
)
from events.exceptions import TransactionConflictError
from events.service.registration import AlreadyRegisteredError, CapacityExceededError

pytestmark = pytest.mark.django_db


def test_version(client: Client) -> None:
    response = client.get(reverse("api:version"))

    assert response.status_code == 200
    assert response.json() == {"version": settings.VERSION}


def test_healthcheck(client: Client) -> None:
    response = client.get(reverse("api:healthcheck"))

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_obtain_token(client: Client, user_factory: t.Any) -> None:
    user_factory(username="login", password="s3cret-pass")

    response = client.post(
        reverse("api:token_obtain_pair"),
        data=orjson.dumps({"username": "login", "password": "s3cret-pass"}),
        content_type="application/json",
    )

    assert response.status_code == 200
    assert "access" in response.json()


def test_obfuscate() -> None:
    data = {"Authorization": "Bearer abc", "Stripe-Signature": "t=1", "Accept": "application/json"}

    masked = obfuscate(data)

    assert masked == {"Authorization": "********", "Stripe-Signature": "********", "Accept": "application/json"}
    assert data["Authorization"] == "Bearer abc"


class TestHandlers:
    @pytest.fixture
    def request_(self) -> HttpRequest:
        return RequestFactory().post("/api/events/x/join")

    def test_registration_error_status(self, request_: HttpRequest) -> None:
        event_id = uuid.uuid4()

        duplicate = handle_registration_error(request_, AlreadyRegisteredError.build(event_id))
        full = handle_registration_error(
            request_, CapacityExceededError.build(event_id, remaining_capacity=0)
        )

        assert duplicate.status_code == 409
        assert full.status_code == 400
        body = orjson.loads(full.content)
        assert body["eligibility"]["remaining_capacity"] == 0
        assert body["eligibility"]["allowed"] is False

    def test_transaction_conflict_is_retryable(self, request_: HttpRequest) -> None:
        response = handle_transaction_conflict_error(request_, TransactionConflictError())

        assert response.status_code == 409
        assert orjson.loads(response.content)["retry"] is True

    def test_participant_not_found(self, request_: HttpRequest) -> None:
        response = handle_participant_not_found_error(
            request_, ParticipantNotFoundError("Child not found.")
        )

        assert response.status_code == 404

    def test_validation_error_without_fields(self, request_: HttpRequest) -> None:
        response = handle_django_validation_error(request_, ValidationError("Nope."))

        assert response.status_code == 400
        assert orjson.loads(response.content) == {"errors": {"__all__": ["Nope."]}}
