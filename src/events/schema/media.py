from uuid import UUID

from ninja import Schema

from common.schema import OneToTwoFiftyFiveString
from events.service.access_service import ArtifactKind


class PresignedUploadRequestSchema(Schema):
    kind: ArtifactKind
    file_name: OneToTwoFiftyFiveString
    mime_type: OneToTwoFiftyFiveString
    event_id: UUID | None = None


class PresignedUploadSchema(Schema):
    upload_url: str
    file_url: str
    key: str


class PresignedDownloadSchema(Schema):
    url: str
    expires_in: int


class EventImagesSchema(Schema):
    event_id: UUID
    keys: list[str]
