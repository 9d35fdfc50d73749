from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from django.core.exceptions import ValidationError

from accounts.models import Child, User
from accounts.participants import AdultRef
from events import schema
from events.models import Event, RosterEntry
from events.service import event_service
from waivers import service as waiver_service
from waivers.models import Waiver

pytestmark = pytest.mark.django_db


def test_create_event_defaults_to_draft(staff_user: User, next_week: datetime) -> None:
    payload = schema.EventCreateSchema(
        title="  Fall Camp ",
        start=next_week,
        end=next_week + timedelta(hours=3),
        registration_deadline=next_week,
        fee=1500,
        currency="eur",
    )

    event = event_service.create_event(staff_user, payload)

    assert event.is_draft
    assert event.title == "Fall Camp"
    assert event.currency == "EUR"
    assert event.created_by == staff_user


def test_update_event_is_partial(event: Event) -> None:
    event_service.update_event(event, schema.EventUpdateSchema(capacity=3))

    event.refresh_from_db()
    assert event.capacity == 3
    assert event.title == "Spring Camp"


def test_update_event_capacity_below_roster(event: Event, registered_family: list[RosterEntry]) -> None:
    with pytest.raises(ValidationError) as exc_info:
        event_service.update_event(event, schema.EventUpdateSchema(capacity=1))

    assert "capacity" in exc_info.value.message_dict
    event.refresh_from_db()
    assert event.capacity == 10


@pytest.mark.parametrize("capacity", [2, 0])
def test_update_event_capacity_at_roster_or_unlimited(
    event: Event, registered_family: list[RosterEntry], capacity: int
) -> None:
    event_service.update_event(event, schema.EventUpdateSchema(capacity=capacity))

    event.refresh_from_db()
    assert event.capacity == capacity


def test_update_event_rejects_foreign_image_keys(event: Event) -> None:
    with pytest.raises(ValidationError):
        event_service.update_event(event, schema.EventUpdateSchema(image_keys=["user-profiles/x/y.png"]))


def test_delete_event_cascades(
    event: Event,
    template: Waiver,
    registered_family: list[RosterEntry],
    user: User,
    child: Child,
    adult_ref: AdultRef,
    blob_store: MagicMock,
    django_capture_on_commit_callbacks: MagicMock,
) -> None:
    Event.objects.filter(pk=event.pk).update(image_keys=[f"{event.image_prefix}cover.png"])
    waiver_service.create(
        event=event,
        ref=adult_ref,
        template=template,
        file_key="waivers/completed/parent.pdf",
        file_name="parent.pdf",
        uploaded_by=user,
    )

    with django_capture_on_commit_callbacks(execute=True):
        event_service.delete_event(event)

    assert not Event.objects.filter(pk=event.pk).exists()
    assert not RosterEntry.objects.exists()
    assert not Waiver.objects.exists()
    assert not user.registered_events.exists()
    assert not child.registered_events.exists()
    deleted = {c.args[0] for c in blob_store.delete.call_args_list}
    assert deleted == {f"{event.image_prefix}cover.png", template.file_key, "waivers/completed/parent.pdf"}


def test_contact_emails(event: Event, registered_family: list[RosterEntry], user: User, other_user: User) -> None:
    RosterEntry.objects.create(event=event, user=other_user)

    assert event_service.contact_emails(event) == sorted([user.email, other_user.email])


def test_attach_waiver_template_marks_existing_entries_pending(
    event: Event, registered_family: list[RosterEntry], staff_user: User
) -> None:
    payload = schema.WaiverTemplateCreateSchema(file_key="waivers/templates/medical.pdf", file_name="medical.pdf")

    template = event_service.attach_waiver_template(event, staff_user, payload)

    assert list(event.required_waivers.all()) == [template]
    for entry in RosterEntry.objects.filter(event=event):
        assert entry.waiver_status == {str(template.pk): "pending"}


def test_attach_waiver_template_checks_prefix(event: Event, staff_user: User) -> None:
    payload = schema.WaiverTemplateCreateSchema(file_key="event-images/x.pdf", file_name="x.pdf")

    with pytest.raises(ValidationError):
        event_service.attach_waiver_template(event, staff_user, payload)


def test_detach_waiver_template(event: Event, template: Waiver, registered_family: list[RosterEntry]) -> None:
    event_service.detach_waiver_template(event, template)

    assert not event.required_waivers.exists()
    assert all(entry.waiver_status == {} for entry in RosterEntry.objects.filter(event=event))
    assert Waiver.objects.filter(pk=template.pk).exists()


def test_registered_events(
    event: Event, paid_event: Event, registered_family: list[RosterEntry], user: User, child: Child
) -> None:
    registered = event_service.registered_events(user)

    assert [item.id for item in registered] == [event.pk]
    assert sorted(registered[0].participants) == sorted([user.get_full_name(), child.get_full_name()])
