import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from accounts.models import Child, User

pytestmark = pytest.mark.django_db


def test_me(user_client: Client, user: User, child: Child) -> None:
    response = user_client.get(reverse("api:me"))

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == user.email
    assert data["is_privileged"] is False
    assert [c["first_name"] for c in data["children"]] == ["Ada"]
    assert len(data["emergency_contacts"]) == 1


def test_me_requires_auth(client: Client) -> None:
    assert client.get(reverse("api:me")).status_code == 401


def test_update_profile(user_client: Client, user: User) -> None:
    payload = {"first_name": "Marie", "address_zip_code": "10001-1234"}

    url = reverse("api:update-profile")
    response = user_client.put(url, data=orjson.dumps(payload), content_type="application/json")

    assert response.status_code == 200, response.content
    user.refresh_from_db()
    assert user.first_name == "Marie"
    assert user.address_zip_code == "10001-1234"


def test_update_profile_bad_zip(user_client: Client) -> None:
    payload = {"address_zip_code": "ABC"}

    url = reverse("api:update-profile")
    response = user_client.put(url, data=orjson.dumps(payload), content_type="application/json")

    assert response.status_code == 422


def test_profile_status(incomplete_client: Client, incomplete_user: User) -> None:
    response = incomplete_client.get(reverse("api:profile-status"))

    assert response.status_code == 200
    data = response.json()
    assert data["complete"] is False
    assert data["participants"][0]["participant_id"] == str(incomplete_user.pk)
    assert "emergency_contact" in data["participants"][0]["missing_fields"]


def test_create_child(user_client: Client, user: User) -> None:
    payload = {"first_name": "Lin", "last_name": "Doe", "birthday": "2016-04-01", "gender": "male"}

    url = reverse("api:create-child")
    response = user_client.post(url, data=orjson.dumps(payload), content_type="application/json")

    assert response.status_code == 201, response.content
    assert user.children.filter(first_name="Lin").exists()


def test_update_child(user_client: Client, child: Child) -> None:
    url = reverse("api:update-child", kwargs={"child_id": child.pk})

    response = user_client.put(url, data=orjson.dumps({"allergies": "bees"}), content_type="application/json")

    assert response.status_code == 200
    assert response.json()["allergies"] == "bees"


@pytest.mark.parametrize("method", ["put", "delete"])
def test_other_users_child_is_not_found(other_client: Client, child: Child, method: str) -> None:
    url_name = "api:update-child" if method == "put" else "api:delete-child"
    url = reverse(url_name, kwargs={"child_id": child.pk})

    response = getattr(other_client, method)(url, data=orjson.dumps({}), content_type="application/json")

    assert response.status_code == 404
    assert Child.objects.filter(pk=child.pk).exists()


def test_delete_child(user_client: Client, child: Child) -> None:
    response = user_client.delete(reverse("api:delete-child", kwargs={"child_id": child.pk}))

    assert response.status_code == 204
    assert not Child.objects.filter(pk=child.pk).exists()
