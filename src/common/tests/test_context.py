import pytest
from django.contrib.auth.models import AnonymousUser

from accounts.models import User
from common.context import RequestContext

pytestmark = pytest.mark.django_db


def test_from_user(user: User, staff_user: User) -> None:
    assert RequestContext.from_user(user) == RequestContext(actor_id=user.pk, is_privileged=False)
    assert RequestContext.from_user(staff_user).is_privileged


def test_from_anonymous() -> None:
    context = RequestContext.from_user(AnonymousUser())

    assert not context.is_authenticated
    assert not context.is_privileged
    assert RequestContext.from_user(None) == context


def test_superuser_is_privileged() -> None:
    superuser = User.objects.create_superuser(username="root", email="root@example.com", password="pw")

    assert RequestContext.from_user(superuser).is_privileged


def test_system_context() -> None:
    context = RequestContext.system()

    assert context.is_privileged
    assert context.actor_id is None
