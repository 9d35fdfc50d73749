"""Tests for the public event endpoints: discovery, details and registration."""

from unittest.mock import MagicMock, patch

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import Child, User
from events.models import Event, Payment, RosterEntry
from waivers.models import Waiver

pytestmark = pytest.mark.django_db


def _participants(user: User, *children: Child) -> dict[str, list[dict[str, str | bool]]]:
    return {
        "participants": [{"participant_id": str(user.pk), "is_child": False}]
        + [{"participant_id": str(c.pk), "is_child": True} for c in children]
    }


class TestListEvents:
    def test_anonymous_sees_published_events(
        self, client: Client, event: Event, paid_event: Event, draft_event: Event
    ) -> None:
        response = client.get(reverse("api:list_events"))

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert {item["title"] for item in data["results"]} == {"Spring Camp", "Summer Camp"}

    def test_staff_sees_drafts(self, staff_client: Client, event: Event, draft_event: Event) -> None:
        response = staff_client.get(reverse("api:list_events"))

        assert response.json()["count"] == 2

    def test_registered_user_sees_draft(
        self, user_client: Client, user: User, event: Event, draft_event: Event
    ) -> None:
        RosterEntry.objects.create(event=draft_event, user=user)

        response = user_client.get(reverse("api:list_events"))

        assert response.json()["count"] == 2

    def test_participant_count_and_search(
        self, client: Client, event: Event, paid_event: Event, registered_family: list[RosterEntry]
    ) -> None:
        response = client.get(reverse("api:list_events"), {"search": "spring"})

        results = response.json()["results"]
        assert len(results) == 1
        assert results[0]["participant_count"] == 2
        assert results[0]["is_free"] is True
        assert results[0]["registration_open"] is True


class TestEventDetails:
    def test_get_event(self, client: Client, event: Event, template: Waiver) -> None:
        response = client.get(reverse("api:get_event", kwargs={"event_id": event.pk}))

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Spring Camp"
        assert [w["id"] for w in data["required_waivers"]] == [str(template.pk)]

    def test_draft_is_hidden(self, client: Client, user_client: Client, draft_event: Event) -> None:
        url = reverse("api:get_event", kwargs={"event_id": draft_event.pk})

        assert client.get(url).status_code == 404
        assert user_client.get(url).status_code == 404

    def test_my_status(
        self,
        user_client: Client,
        event: Event,
        template: Waiver,
        registered_family: list[RosterEntry],
        child: Child,
    ) -> None:
        response = user_client.get(reverse("api:get_my_event_status", kwargs={"event_id": event.pk}))

        assert response.status_code == 200
        by_id = {item["participant_id"]: item for item in response.json()}
        assert by_id[str(child.pk)]["registered"] is True
        assert by_id[str(child.pk)]["waiver_status"] == {str(template.pk): "pending"}

    def test_my_status_requires_auth(self, client: Client, event: Event) -> None:
        response = client.get(reverse("api:get_my_event_status", kwargs={"event_id": event.pk}))

        assert response.status_code == 401

    def test_list_waivers(self, user_client: Client, event: Event, template: Waiver) -> None:
        response = user_client.get(reverse("api:list_event_waivers", kwargs={"event_id": event.pk}))

        assert response.status_code == 200
        assert response.json()[0]["file_key"] == template.file_key

    def test_my_events(
        self, user_client: Client, event: Event, registered_family: list[RosterEntry], child: Child
    ) -> None:
        response = user_client.get(reverse("api:my_events"))

        assert response.status_code == 200
        data = response.json()
        assert [item["id"] for item in data] == [str(event.pk)]
        assert child.get_full_name() in data[0]["participants"]


class TestJoinEvent:
    def test_join_free_event(self, user_client: Client, event: Event, user: User, child: Child) -> None:
        url = reverse("api:join_event", kwargs={"event_id": event.pk})

        response = user_client.post(url, data=orjson.dumps(_participants(user, child)), content_type="application/json")

        assert response.status_code == 200, response.content
        assert response.json()["status"] == "registered"
        assert RosterEntry.objects.filter(event=event).count() == 2

    def test_join_paid_event_returns_amount(self, user_client: Client, paid_event: Event, user: User) -> None:
        url = reverse("api:join_event", kwargs={"event_id": paid_event.pk})

        response = user_client.post(url, data=orjson.dumps(_participants(user)), content_type="application/json")

        assert response.status_code == 200
        assert response.json()["status"] == "payment_required"
        assert response.json()["amount"] == 500
        assert not RosterEntry.objects.exists()

    def test_join_twice(self, user_client: Client, event: Event, user: User) -> None:
        url = reverse("api:join_event", kwargs={"event_id": event.pk})
        payload = orjson.dumps(_participants(user))
        user_client.post(url, data=payload, content_type="application/json")

        response = user_client.post(url, data=payload, content_type="application/json")

        assert response.status_code == 409
        assert response.json()["eligibility"]["participant_ids"] == [str(user.pk)]

    def test_incomplete_profile(self, incomplete_client: Client, event: Event, incomplete_user: User) -> None:
        url = reverse("api:join_event", kwargs={"event_id": event.pk})

        response = incomplete_client.post(
            url, data=orjson.dumps(_participants(incomplete_user)), content_type="application/json"
        )

        assert response.status_code == 400
        eligibility = response.json()["eligibility"]
        assert eligibility["next_step"] == "complete_profile"
        assert "emergency_contact" in eligibility["missing_profile_fields"][str(incomplete_user.pk)]

    def test_event_full(self, user_client: Client, event: Event, user: User, child: Child) -> None:
        event.capacity = 1
        event.save()
        url = reverse("api:join_event", kwargs={"event_id": event.pk})

        response = user_client.post(url, data=orjson.dumps(_participants(user, child)), content_type="application/json")

        assert response.status_code == 400
        assert response.json()["eligibility"]["remaining_capacity"] == 1
        assert not RosterEntry.objects.exists()

    def test_other_users_child(self, other_client: Client, event: Event, other_user: User, child: Child) -> None:
        url = reverse("api:join_event", kwargs={"event_id": event.pk})
        payload = {"participants": [{"participant_id": str(child.pk), "is_child": True}]}

        response = other_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 403
        assert not RosterEntry.objects.exists()

    def test_empty_selection(self, user_client: Client, event: Event) -> None:
        url = reverse("api:join_event", kwargs={"event_id": event.pk})

        response = user_client.post(url, data=orjson.dumps({"participants": []}), content_type="application/json")

        assert response.status_code == 422

    def test_requires_auth(self, client: Client, event: Event, user: User) -> None:
        url = reverse("api:join_event", kwargs={"event_id": event.pk})

        response = client.post(url, data=orjson.dumps(_participants(user)), content_type="application/json")

        assert response.status_code == 401


class TestCheckout:
    @patch("events.service.checkout_service.Session.create")
    def test_checkout(self, mock_create: MagicMock, user_client: Client, paid_event: Event, user: User) -> None:
        # Arrange
        mock_create.return_value = MagicMock(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1")
        url = reverse("api:checkout_event", kwargs={"event_id": paid_event.pk})

        # Act
        response = user_client.post(url, data=orjson.dumps(_participants(user)), content_type="application/json")

        # Assert
        assert response.status_code == 200, response.content
        assert response.json()["session_url"] == "https://checkout.stripe.com/c/pay/cs_test_1"
        assert not RosterEntry.objects.exists()
        assert not Payment.objects.exists()

    def test_checkout_free_event(self, user_client: Client, event: Event, user: User) -> None:
        url = reverse("api:checkout_event", kwargs={"event_id": event.pk})

        response = user_client.post(url, data=orjson.dumps(_participants(user)), content_type="application/json")

        assert response.status_code == 400
        assert response.json()["detail"] == "Nothing to purchase."


class TestUnregister:
    def test_unregister_child(
        self, user_client: Client, event: Event, registered_family: list[RosterEntry], child: Child
    ) -> None:
        url = reverse("api:unregister_event", kwargs={"event_id": event.pk})
        payload = {"participants": [{"participant_id": str(child.pk), "is_child": True}]}

        response = user_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 200
        assert response.json()[0]["removed"] is True
        assert RosterEntry.objects.filter(event=event).count() == 1

    def test_unregister_paid_event(self, user_client: Client, paid_event: Event, user: User) -> None:
        url = reverse("api:unregister_event", kwargs={"event_id": paid_event.pk})

        response = user_client.post(url, data=orjson.dumps(_participants(user)), content_type="application/json")

        assert response.status_code == 400
        assert response.json()["eligibility"]["next_step"] == "contact_admin"


class TestSignWaiver:
    def test_sign(
        self, user_client: Client, event: Event, template: Waiver, registered_family: list[RosterEntry], user: User
    ) -> None:
        url = reverse("api:sign_waiver", kwargs={"event_id": event.pk, "template_id": template.pk})
        payload = {"participant_id": str(user.pk), "file_key": "waivers/completed/x.pdf", "file_name": "x.pdf"}

        response = user_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 201, response.content
        assert response.json()["template_id"] == str(template.pk)
        entry = RosterEntry.objects.get(event=event, user=user, child__isnull=True)
        assert entry.waiver_status[str(template.pk)] == "signed"

    def test_not_registered(self, user_client: Client, event: Event, template: Waiver, user: User) -> None:
        url = reverse("api:sign_waiver", kwargs={"event_id": event.pk, "template_id": template.pk})
        payload = {"participant_id": str(user.pk), "file_key": "waivers/completed/x.pdf", "file_name": "x.pdf"}

        response = user_client.post(url, data=orjson.dumps(payload), content_type="application/json")

        assert response.status_code == 400
        assert "participant_id" in response.json()["errors"]
