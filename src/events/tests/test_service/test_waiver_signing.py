from unittest.mock import MagicMock

import pytest
from django.core.exceptions import ValidationError

from accounts.models import Child, User
from accounts.participants import AdultRef
from common.auth_base import PermissionDenied
from common.context import RequestContext
from events.models import Event, RosterEntry
from events.service import waiver_signing
from events.service.registration import ParticipantSelection
from waivers import service as waiver_service
from waivers.models import Waiver

pytestmark = pytest.mark.django_db


def _sign(
    user: User, event: Event, template: Waiver, selection: ParticipantSelection, file_key: str
) -> Waiver:
    return waiver_signing.sign_waiver(
        RequestContext.from_user(user),
        user,
        event,
        template,
        selection,
        file_key=file_key,
        file_name="signed.pdf",
    )


def test_sign_waiver_for_child(
    event: Event, template: Waiver, registered_family: list[RosterEntry], user: User, child: Child
) -> None:
    waiver = _sign(
        user, event, template, ParticipantSelection(participant_id=child.pk, is_child=True), "waivers/completed/a.pdf"
    )

    assert waiver.kind == Waiver.Kind.COMPLETED
    assert waiver.belongs_to_user == user
    assert waiver.child == child
    assert waiver.is_for_child
    entry = RosterEntry.objects.get(event=event, child=child)
    assert entry.waiver_status == {str(template.pk): "signed"}
    assert entry.all_waivers_signed
    assert not RosterEntry.objects.get(event=event, child__isnull=True).all_waivers_signed


def test_signing_again_replaces_the_copy(
    event: Event,
    template: Waiver,
    registered_family: list[RosterEntry],
    user: User,
    blob_store: MagicMock,
    django_capture_on_commit_callbacks: MagicMock,
) -> None:
    selection = ParticipantSelection(participant_id=user.pk)
    _sign(user, event, template, selection, "waivers/completed/first.pdf")

    with django_capture_on_commit_callbacks(execute=True):
        _sign(user, event, template, selection, "waivers/completed/second.pdf")

    keys = list(waiver_service.find_completed(event.pk, AdultRef(user_id=user.pk)).values_list("file_key", flat=True))
    assert keys == ["waivers/completed/second.pdf"]
    blob_store.delete.assert_called_once_with("waivers/completed/first.pdf")


def test_signing_again_with_the_same_file_keeps_it(
    event: Event,
    template: Waiver,
    registered_family: list[RosterEntry],
    user: User,
    blob_store: MagicMock,
    django_capture_on_commit_callbacks: MagicMock,
) -> None:
    selection = ParticipantSelection(participant_id=user.pk)
    _sign(user, event, template, selection, "waivers/completed/same.pdf")

    with django_capture_on_commit_callbacks(execute=True):
        _sign(user, event, template, selection, "waivers/completed/same.pdf")

    keys = list(waiver_service.find_completed(event.pk, AdultRef(user_id=user.pk)).values_list("file_key", flat=True))
    assert keys == ["waivers/completed/same.pdf"]
    blob_store.delete.assert_not_called()


def test_unregistered_participant(event: Event, template: Waiver, user: User) -> None:
    with pytest.raises(ValidationError):
        _sign(user, event, template, ParticipantSelection(participant_id=user.pk), "waivers/completed/a.pdf")

    assert not Waiver.objects.completed().exists()


def test_template_not_required(
    event: Event, registered_family: list[RosterEntry], user: User, staff_user: User
) -> None:
    unrelated = waiver_service.create_template(
        uploaded_by=staff_user, file_key="waivers/templates/other.pdf", file_name="other.pdf"
    )

    with pytest.raises(ValidationError):
        _sign(user, event, unrelated, ParticipantSelection(participant_id=user.pk), "waivers/completed/a.pdf")


def test_wrong_prefix(event: Event, template: Waiver, registered_family: list[RosterEntry], user: User) -> None:
    with pytest.raises(ValidationError):
        _sign(user, event, template, ParticipantSelection(participant_id=user.pk), f"user-profiles/{user.pk}/a.pdf")


def test_someone_elses_child(
    event: Event, template: Waiver, registered_family: list[RosterEntry], other_user: User, child: Child
) -> None:
    with pytest.raises(PermissionDenied):
        _sign(
            other_user,
            event,
            template,
            ParticipantSelection(participant_id=child.pk, is_child=True),
            "waivers/completed/a.pdf",
        )


def test_required_templates(event: Event, template: Waiver) -> None:
    assert waiver_signing.required_templates(event) == [template]
