"""Typed references to the two kinds of participant: an account holder or one of their children."""

import typing as t
import uuid
from dataclasses import dataclass

from django.db.models import Q


@dataclass(frozen=True)
class AdultRef:
    user_id: uuid.UUID

    is_child: t.ClassVar[bool] = False

    @property
    def account_id(self) -> uuid.UUID:
        """The account responsible for this participant."""
        return self.user_id

    @property
    def participant_id(self) -> uuid.UUID:
        return self.user_id


@dataclass(frozen=True)
class ChildRef:
    parent_id: uuid.UUID
    child_id: uuid.UUID

    is_child: t.ClassVar[bool] = True

    @property
    def account_id(self) -> uuid.UUID:
        """The account responsible for this participant."""
        return self.parent_id

    @property
    def participant_id(self) -> uuid.UUID:
        return self.child_id


ParticipantRef = AdultRef | ChildRef


def participant_filter(ref: ParticipantRef, *, user_field: str = "user", child_field: str = "child") -> Q:
    """Build the lookup matching rows scoped to one participant.

    Rows belonging to a child carry the parent in ``user_field`` and the child in
    ``child_field``; adult rows leave ``child_field`` empty.
    """
    if isinstance(ref, ChildRef):
        return Q(**{user_field: ref.parent_id, child_field: ref.child_id})
    return Q(**{user_field: ref.user_id, f"{child_field}__isnull": True})


def ref_from_ids(user_id: uuid.UUID, child_id: uuid.UUID | None) -> ParticipantRef:
    """Rebuild a reference from a row's (user, child) columns."""
    if child_id is not None:
        return ChildRef(parent_id=user_id, child_id=child_id)
    return AdultRef(user_id=user_id)
