"""Shared fixtures: users with complete profiles, events, authenticated clients and a fake blob store."""

import secrets
import string
import typing as t
from datetime import date, datetime, time, timedelta
from unittest.mock import MagicMock

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import Child, EmergencyContact, Gender, User
from common.storage import PresignedUpload, build_object_key
from events.models import Event


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits of write throttles to allow testing."""
    monkeypatch.setattr("common.throttling.RegistrationThrottle.rate", "1000/min")
    monkeypatch.setattr("common.throttling.WriteThrottle.rate", "1000/min")


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()


@pytest.fixture(autouse=True)
def blob_store(monkeypatch: MonkeyPatch) -> MagicMock:
    """Replace the S3 backend with a mock so no test talks to a bucket."""
    store = MagicMock()

    def presigned_upload(prefix: str, file_name: str, mime_type: str) -> PresignedUpload:
        key = build_object_key(prefix, file_name)
        return PresignedUpload(
            upload_url=f"https://bucket.test/{key}?X-Amz-Signature=upload",
            file_url=f"https://bucket.test/{key}",
            key=key,
        )

    store.presigned_upload.side_effect = presigned_upload
    store.presigned_download.side_effect = lambda key, ttl_seconds: f"https://bucket.test/{key}?expires={ttl_seconds}"
    store.list.return_value = []
    monkeypatch.setattr("common.storage.get_blob_store", lambda: store)
    return store


class UserFactory:
    """Factory for creating User instances for testing."""

    fake = faker.Faker()

    def create_user(self, *, complete: bool = True, **kwargs: t.Any) -> User:
        username = kwargs.pop("username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)))
        email = kwargs.pop("email", f"{username}@example.com")
        password = kwargs.pop("password", "password")
        profile: dict[str, t.Any] = {}
        if complete:
            profile = {
                "gender": Gender.UNDISCLOSED,
                "birthday": date(1985, 5, 17),
                "address_home": self.fake.street_address(),
                "address_city": self.fake.city(),
                "address_zip_code": "94110",
                "phone_cell": "+14155550100",
                "photo_release": True,
            }
        profile.update(kwargs)
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=profile.pop("first_name", self.fake.first_name()),
            last_name=profile.pop("last_name", self.fake.last_name()),
            **profile,
        )
        if complete:
            EmergencyContact.objects.create(
                user=user, name=self.fake.name(), phone="+14155550199", relationship="Sibling"
            )
        return user

    def create_child(self, parent: User, *, complete: bool = True, **kwargs: t.Any) -> Child:
        profile: dict[str, t.Any] = {"first_name": self.fake.first_name(), "last_name": parent.last_name}
        if complete:
            profile.update(gender=Gender.FEMALE, birthday=date(2015, 3, 2), photo_release=False)
        profile.update(kwargs)
        child = Child.objects.create(parent=parent, **profile)
        if complete:
            EmergencyContact.objects.create(
                child=child, name=parent.get_full_name(), phone="+14155550100", relationship="Parent"
            )
        return child

    def __call__(self, **kwargs: t.Any) -> User:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> UserFactory:
    return UserFactory()


@pytest.fixture
def user(user_factory: UserFactory) -> User:
    """A standard, non-privileged user with a complete profile."""
    return user_factory(username="parent")


@pytest.fixture
def other_user(user_factory: UserFactory) -> User:
    return user_factory(username="stranger")


@pytest.fixture
def incomplete_user(user_factory: UserFactory) -> User:
    """A user who only has a name and an email."""
    return user_factory(username="newcomer", complete=False)


@pytest.fixture
def staff_user(user_factory: UserFactory) -> User:
    """An administrator."""
    return user_factory(username="admin", is_staff=True)


@pytest.fixture
def child(user_factory: UserFactory, user: User) -> Child:
    """A child of ``user`` with a complete profile."""
    return user_factory.create_child(user, first_name="Ada")


def make_client(user: User) -> Client:
    return Client(HTTP_AUTHORIZATION=f"Bearer {RefreshToken.for_user(user).access_token}")  # type: ignore[attr-defined]


@pytest.fixture
def user_client(user: User) -> Client:
    return make_client(user)


@pytest.fixture
def other_client(other_user: User) -> Client:
    return make_client(other_user)


@pytest.fixture
def incomplete_client(incomplete_user: User) -> Client:
    return make_client(incomplete_user)


@pytest.fixture
def staff_client(staff_user: User) -> Client:
    return make_client(staff_user)


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )


@pytest.fixture
def event(next_week: datetime, staff_user: User) -> Event:
    """A published, free event with ten spots, open for registration until the day before."""
    return Event.objects.create(
        title="Spring Camp",
        location="Golden Gate Park",
        start=next_week,
        end=next_week + timedelta(hours=6),
        registration_deadline=next_week - timedelta(days=1),
        capacity=10,
        is_draft=False,
        created_by=staff_user,
    )


@pytest.fixture
def paid_event(next_week: datetime, staff_user: User) -> Event:
    """A published event with a fee of 5.00 per participant."""
    return Event.objects.create(
        title="Summer Camp",
        start=next_week,
        end=next_week + timedelta(hours=6),
        registration_deadline=next_week - timedelta(days=1),
        capacity=10,
        fee=500,
        currency="USD",
        is_draft=False,
        created_by=staff_user,
    )


@pytest.fixture
def draft_event(next_week: datetime, staff_user: User) -> Event:
    return Event.objects.create(
        title="Secret Retreat",
        start=next_week,
        end=next_week + timedelta(hours=6),
        registration_deadline=next_week - timedelta(days=1),
        created_by=staff_user,
    )
