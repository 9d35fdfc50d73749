from django.utils.translation import gettext_lazy as _


class TransactionConflictError(Exception):
    """Raised when a registration transaction lost a lock or serialization race. Safe to retry."""

    def __init__(self, message: str = str(_("The event is busy, please retry."))) -> None:
        """Initialize with a retry hint message."""
        super().__init__(message)


class InvalidSignatureError(Exception):
    """Raised when a payment processor callback fails signature verification."""


class UpstreamUnavailableError(Exception):
    """Raised when the payment processor rejects or fails a request."""


class PaymentReconciliationError(Exception):
    """Raised when a confirmed payment could not be committed to the roster.

    Surfaced as a server error so the processor re-delivers the callback.
    """

    def __init__(self, message: str, session_id: str) -> None:
        """Keep the session id for logging."""
        super().__init__(message)
        self.session_id = session_id


class ArtifactAccessDeniedError(Exception):
    """Raised when the access gate denies a stored artifact."""

    def __init__(self, message: str, reason: str) -> None:
        """Keep the machine-readable denial reason."""
        super().__init__(message)
        self.reason = reason
