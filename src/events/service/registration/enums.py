"""Enums for the registration eligibility system."""

from enum import StrEnum

from django.utils.translation import gettext_noop


class NextStep(StrEnum):
    """What the caller can do to move the registration forward."""

    COMPLETE_PROFILE = "complete_profile"
    PAY = "pay"
    SIGN_WAIVERS = "sign_waivers"
    WAIT_FOR_PUBLICATION = "wait_for_publication"
    CONTACT_ADMIN = "contact_admin"


class Reasons(StrEnum):
    """Reasons why participants cannot be registered.

    Note: Strings are marked with _noop() for translation extraction.
    The actual translation happens where the eligibility is built, using _(Reasons.XXX).
    """

    EVENT_IS_DRAFT = gettext_noop("This event is not open for registration yet.")
    DEADLINE_PASSED = gettext_noop("The registration deadline has passed.")
    REQUIRES_FULL_PROFILE = gettext_noop("Requires full profile.")
    ALREADY_REGISTERED = gettext_noop("Already registered.")
    EVENT_IS_FULL = gettext_noop("Event is full.")
    REQUIRES_PAYMENT = gettext_noop("Requires payment.")
    NOTHING_TO_PURCHASE = gettext_noop("Nothing to purchase.")
    PAID_CANCELLATION = gettext_noop("Paid registrations can only be cancelled by an administrator.")


class RegistrationStatus(StrEnum):
    REGISTERED = "registered"
    PAYMENT_REQUIRED = "payment_required"
