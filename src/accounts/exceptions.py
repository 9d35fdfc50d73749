class ParticipantNotFoundError(Exception):
    """Raised when a referenced user or child does not exist."""


class ParticipantOwnershipError(Exception):
    """Raised when a caller acts on a participant that is neither themselves nor their child."""
