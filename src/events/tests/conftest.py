import pytest

from accounts.models import Child, User
from accounts.participants import AdultRef, ChildRef
from common.context import RequestContext
from events.models import Event, RosterEntry
from events.service.registration import ParticipantSelection, RegistrationManager
from waivers import service as waiver_service
from waivers.models import Waiver


@pytest.fixture
def user_context(user: User) -> RequestContext:
    return RequestContext.from_user(user)


@pytest.fixture
def staff_context(staff_user: User) -> RequestContext:
    return RequestContext.from_user(staff_user)


@pytest.fixture
def adult_ref(user: User) -> AdultRef:
    return AdultRef(user_id=user.pk)


@pytest.fixture
def child_ref(child: Child) -> ChildRef:
    return ChildRef(parent_id=child.parent_id, child_id=child.pk)


@pytest.fixture
def template(event: Event, staff_user: User) -> Waiver:
    """A waiver template required by ``event``."""
    waiver = waiver_service.create_template(
        uploaded_by=staff_user, file_key="waivers/templates/release.pdf", file_name="release.pdf", event=event
    )
    event.required_waivers.add(waiver)
    return waiver


@pytest.fixture
def registered_family(event: Event, user: User, child: Child, user_context: RequestContext) -> list[RosterEntry]:
    """``user`` and ``child`` registered for ``event``."""
    manager = RegistrationManager(user_context, event)
    manager.join(
        [
            ParticipantSelection(participant_id=user.pk),
            ParticipantSelection(participant_id=child.pk, is_child=True),
        ]
    )
    return list(RosterEntry.objects.filter(event=event))
