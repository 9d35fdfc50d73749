from unittest.mock import MagicMock

import pytest
from django.core.exceptions import ValidationError

from accounts import schema
from accounts.models import Child, EmergencyContact, User
from accounts.participants import AdultRef, ChildRef
from accounts.service import account as account_service
from common.context import RequestContext
from events.models import Event, RosterEntry
from events.service import roster
from events.service.registration import ParticipantSelection, RegistrationManager
from waivers import service as waiver_service
from waivers.models import Waiver

pytestmark = pytest.mark.django_db


class TestUpdateProfile:
    def test_partial_update(self, user: User) -> None:
        address = user.address_home

        updated = account_service.update_profile(user, schema.ProfileUpdateSchema(phone_cell="+1 (415) 555-0111"))

        assert updated.phone_cell == "+14155550111"
        assert updated.address_home == address

    def test_replaces_emergency_contacts(self, user: User) -> None:
        payload = schema.ProfileUpdateSchema(
            emergency_contacts=[
                schema.EmergencyContactIn(name="Grace", phone="+14155550123", relationship="Aunt", can_pickup=True)
            ]
        )

        account_service.update_profile(user, payload)

        assert list(user.emergency_contacts.values_list("name", flat=True)) == ["Grace"]

    def test_image_key_must_be_own_folder(self, user: User, other_user: User) -> None:
        payload = schema.ProfileUpdateSchema(image_key=f"user-profiles/{other_user.pk}/me.png")

        with pytest.raises(ValidationError):
            account_service.update_profile(user, payload)

    def test_image_key(self, user: User) -> None:
        key = f"user-profiles/{user.pk}/me.png"

        assert account_service.update_profile(user, schema.ProfileUpdateSchema(image_key=key)).image_key == key

    def test_clearing_photo_release(self, user: User) -> None:
        updated = account_service.update_profile(user, schema.ProfileUpdateSchema(photo_release=None))

        assert updated.photo_release is None


def test_create_child(user: User) -> None:
    payload = schema.ChildCreateSchema(
        first_name="Lin",
        last_name="Doe",
        emergency_contacts=[schema.EmergencyContactIn(name="Mom", phone="+14155550100", relationship="Parent")],
    )

    child = account_service.create_child(user, payload)

    assert child.parent == user
    assert EmergencyContact.objects.filter(child=child).count() == 1


def test_update_child_keeps_contacts_when_omitted(child: Child) -> None:
    updated = account_service.update_child(child, schema.ChildUpdateSchema(allergies="peanuts"))

    assert updated.allergies == "peanuts"
    assert updated.emergency_contacts.count() == 1


def test_delete_child_cascades(
    event: Event,
    staff_user: User,
    user: User,
    child: Child,
    blob_store: MagicMock,
    django_capture_on_commit_callbacks: MagicMock,
) -> None:
    template = waiver_service.create_template(
        uploaded_by=staff_user, file_key="waivers/templates/release.pdf", file_name="release.pdf", event=event
    )
    ref = ChildRef(parent_id=user.pk, child_id=child.pk)
    roster.register(event, ref, [template.pk])
    waiver_service.create(
        event=event,
        ref=ref,
        template=template,
        file_key="waivers/completed/child.pdf",
        file_name="child.pdf",
        uploaded_by=user,
    )

    with django_capture_on_commit_callbacks(execute=True):
        account_service.delete_child(child)

    assert not Child.objects.exists()
    assert not RosterEntry.objects.exists()
    assert not Waiver.objects.completed().exists()
    blob_store.delete.assert_called_once_with("waivers/completed/child.pdf")

def test_delete_child_leaves_every_roster(event: Event, paid_event: Event, user: User, child: Child) -> None:
    context = RequestContext.from_user(user)
    family = [
        ParticipantSelection(participant_id=user.pk),
        ParticipantSelection(participant_id=child.pk, is_child=True),
    ]
    RegistrationManager(context, event).join(family)
    RegistrationManager(context, paid_event).commit(
        [AdultRef(user_id=user.pk), ChildRef(parent_id=user.pk, child_id=child.pk)]
    )

    account_service.delete_child(child)

    assert not RosterEntry.objects.filter(child__isnull=False).exists()
    assert RosterEntry.objects.filter(user=user, child__isnull=True).count() == 2
    assert set(user.registered_events.all()) == {event, paid_event}


def test_profile_status(user: User, child: Child) -> None:
    Child.objects.create(parent=user, first_name="Bo", last_name="Doe")

    status = account_service.profile_status(user)

    assert not status.complete
    assert [p.complete for p in status.participants] == [True, True, False]
    assert "birthday" in status.participants[2].missing_fields
