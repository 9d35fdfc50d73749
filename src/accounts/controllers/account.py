"""This module contains the controllers for accounts, profiles and children."""

import typing as t
from uuid import UUID

from ninja_extra import ControllerBase, api_controller, route

from accounts.models import Child, User
from accounts.schema import (
    ChildCreateSchema,
    ChildSchema,
    ChildUpdateSchema,
    ProfileStatusSchema,
    ProfileUpdateSchema,
    UserSchema,
)
from accounts.service import account as account_service
from common.auth_base import BaseJWTAuth
from common.schema import ValidationErrorResponse
from common.throttling import WriteThrottle


@api_controller("/account", tags=["Account"], auth=BaseJWTAuth())
class AccountController(ControllerBase):
    def user(self) -> User:
        """Get the user for this request."""
        return t.cast(User, self.context.request.user)  # type: ignore[union-attr]

    def get_child(self, child_id: UUID) -> Child:
        """A child of the caller. Children of other accounts are reported as not found."""
        return t.cast(Child, self.get_object_or_exception(Child.objects.filter(parent=self.user()), pk=child_id))

    @route.get("/me", response=UserSchema, url_name="me")
    def me(self) -> User:
        """Retrieve the authenticated user's profile, emergency contacts and children."""
        return User.objects.prefetch_related("emergency_contacts", "children__emergency_contacts").get(
            pk=self.user().pk
        )

    @route.put(
        "/me",
        response={200: UserSchema, 400: ValidationErrorResponse},
        url_name="update-profile",
        throttle=WriteThrottle(),
    )
    def update_profile(self, payload: ProfileUpdateSchema) -> User:
        """Update the authenticated user's profile.

        Only provided fields are updated. Sending emergency_contacts replaces the
        whole list. A complete profile is required to register for events; check
        GET /account/me/status to see what is missing.
        """
        account_service.update_profile(self.user(), payload)
        return self.me()

    @route.get("/me/status", response=ProfileStatusSchema, url_name="profile-status")
    def profile_status(self) -> ProfileStatusSchema:
        """Profile completeness of the account holder and of each child, with the missing fields."""
        return account_service.profile_status(self.user())

    @route.post(
        "/children",
        response={201: ChildSchema, 400: ValidationErrorResponse},
        url_name="create-child",
        throttle=WriteThrottle(),
    )
    def create_child(self, payload: ChildCreateSchema) -> tuple[int, Child]:
        """Add a child to the account. Children are registered for events by their parent."""
        return 201, account_service.create_child(self.user(), payload)

    @route.put(
        "/children/{uuid:child_id}",
        response={200: ChildSchema, 400: ValidationErrorResponse},
        url_name="update-child",
        throttle=WriteThrottle(),
    )
    def update_child(self, child_id: UUID, payload: ChildUpdateSchema) -> Child:
        """Update a child's profile. Sending emergency_contacts replaces the whole list."""
        return account_service.update_child(self.get_child(child_id), payload)

    @route.delete("/children/{uuid:child_id}", response={204: None}, url_name="delete-child", throttle=WriteThrottle())
    def delete_child(self, child_id: UUID) -> tuple[int, None]:
        """Delete a child, along with their event registrations and signed waivers."""
        account_service.delete_child(self.get_child(child_id))
        return 204, None
