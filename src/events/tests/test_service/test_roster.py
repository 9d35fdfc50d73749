import pytest

from accounts.models import Child, User
from accounts.participants import AdultRef, ChildRef
from events.models import Event, RosterEntry
from events.service import roster
from events.service.registration import AlreadyRegisteredError, CapacityExceededError

pytestmark = pytest.mark.django_db


def test_register_creates_entry_with_pending_waivers(event: Event, adult_ref: AdultRef) -> None:
    template_id = "6f1c1d5e-9f0a-4d77-8d0e-000000000001"

    entry = roster.register(event, adult_ref, [template_id])

    assert entry.user_id == adult_ref.user_id
    assert entry.child_id is None
    assert entry.waiver_status == {template_id: RosterEntry.WaiverStatus.PENDING}
    assert not entry.all_waivers_signed


def test_register_child_records_parent(event: Event, child_ref: ChildRef, user: User) -> None:
    entry = roster.register(event, child_ref, [])

    assert entry.user_id == user.pk
    assert entry.child_id == child_ref.child_id
    assert entry.is_child
    assert entry.all_waivers_signed


def test_register_twice_is_rejected(event: Event, adult_ref: AdultRef) -> None:
    roster.register(event, adult_ref, [])

    with pytest.raises(AlreadyRegisteredError):
        roster.register(event, adult_ref, [])

    assert RosterEntry.objects.filter(event=event).count() == 1


def test_adult_and_child_are_distinct_participants(event: Event, adult_ref: AdultRef, child_ref: ChildRef) -> None:
    roster.register(event, adult_ref, [])
    roster.register(event, child_ref, [])

    assert roster.is_registered(event, adult_ref)
    assert roster.is_registered(event, child_ref)
    assert roster.participant_count(event) == 2


def test_register_full_event(event: Event, user: User, other_user: User) -> None:
    event.capacity = 1
    event.save()
    roster.register(event, AdultRef(user_id=user.pk), [])

    with pytest.raises(CapacityExceededError):
        roster.register(event, AdultRef(user_id=other_user.pk), [])


def test_remaining_capacity(event: Event, adult_ref: AdultRef, child_ref: ChildRef) -> None:
    assert roster.remaining_capacity(event) == 10
    roster.register(event, adult_ref, [])
    roster.register(event, child_ref, [])
    assert roster.remaining_capacity(event) == 8

    event.capacity = 0
    event.save()
    assert roster.remaining_capacity(event) is None


def test_registered_refs_returns_subset(event: Event, adult_ref: AdultRef, child_ref: ChildRef) -> None:
    roster.register(event, child_ref, [])

    assert roster.registered_refs(event, [adult_ref, child_ref]) == {child_ref}
    assert roster.registered_refs(event, []) == set()


def test_remove_only_touches_the_given_participant(
    event: Event, adult_ref: AdultRef, child_ref: ChildRef, child: Child
) -> None:
    roster.register(event, adult_ref, [])
    roster.register(event, child_ref, [])

    assert roster.remove(event, child_ref) is True

    assert roster.is_registered(event, adult_ref)
    assert not roster.is_registered(event, child_ref)


def test_remove_unregistered_is_noop(event: Event, adult_ref: AdultRef) -> None:
    assert roster.remove(event, adult_ref) is False
