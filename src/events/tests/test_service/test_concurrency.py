"""Concurrent joins against the same event.

Row locks are what keep the roster within capacity, so these tests need a
database that takes them.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from django.db import connection, connections

from accounts.models import User
from common.context import RequestContext
from conftest import UserFactory
from events.models import Event, RosterEntry
from events.service.registration import CapacityExceededError, ParticipantSelection, RegistrationManager

pytestmark = [
    pytest.mark.django_db(transaction=True),
    pytest.mark.skipif(connection.vendor != "postgresql", reason="select_for_update needs PostgreSQL"),
]


def _join_all(event: Event, users: list[User]) -> list[str]:
    """Join ``event`` once per user, all threads released at the same moment."""
    barrier = threading.Barrier(len(users))

    def join(user: User) -> str:
        try:
            barrier.wait()
            RegistrationManager(RequestContext.from_user(user), event).join(
                [ParticipantSelection(participant_id=user.pk)]
            )
            return "registered"
        except CapacityExceededError:
            return "full"
        finally:
            connections.close_all()

    with ThreadPoolExecutor(max_workers=len(users)) as executor:
        return list(executor.map(join, users))


@pytest.mark.parametrize("capacity,attempts", [(1, 2), (2, 5)])
def test_concurrent_joins_never_exceed_capacity(
    event: Event, user_factory: UserFactory, capacity: int, attempts: int
) -> None:
    Event.objects.filter(pk=event.pk).update(capacity=capacity)
    event.refresh_from_db()
    users = [user_factory() for _ in range(attempts)]

    outcomes = _join_all(event, users)

    assert outcomes.count("registered") == capacity
    assert outcomes.count("full") == attempts - capacity
    assert RosterEntry.objects.filter(event=event).count() == capacity
