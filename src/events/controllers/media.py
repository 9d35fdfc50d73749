"""Presigned upload and download URLs for stored artifacts.

Files never pass through the API: clients PUT to the upload URL and GET from
the download URL directly. Every URL is issued only after the access gate in
``events.service.access_service`` allowed the caller.
"""

from uuid import UUID

from django.conf import settings
from ninja_extra import api_controller, route

from common.auth_base import BaseJWTAuth
from common.authentication import OptionalAuth
from common.controllers import UserAwareController
from common.schema import ValidationErrorResponse
from common.throttling import MediaThrottle
from events import schema
from events.service import access_service


@api_controller("/media", auth=OptionalAuth(), tags=["Media"], throttle=MediaThrottle())
class MediaController(UserAwareController):
    @route.post(
        "/presigned-upload",
        url_name="presigned_upload",
        response={200: schema.PresignedUploadSchema, 400: ValidationErrorResponse},
        auth=BaseJWTAuth(),
    )
    def presigned_upload(self, payload: schema.PresignedUploadRequestSchema) -> schema.PresignedUploadSchema:
        """Get a short-lived URL to upload one file.

        Event images and waiver templates can only be uploaded by administrators.
        Profile images go to the caller's own folder. Signed waivers can be uploaded
        by any authenticated caller and are bound to a participant when signed.
        The returned key is what the other endpoints expect.
        """
        upload = access_service.presigned_upload(
            self.request_context(),
            payload.kind,
            payload.file_name,
            payload.mime_type,
            event_id=payload.event_id,
        )
        return schema.PresignedUploadSchema(**upload.model_dump())

    @route.get("/presigned-download", url_name="presigned_download", response=schema.PresignedDownloadSchema)
    def presigned_download(self, key: str) -> schema.PresignedDownloadSchema:
        """Get a short-lived URL to download a stored file the caller has access to."""
        url = access_service.presigned_download(self.request_context(), key)
        return schema.PresignedDownloadSchema(url=url, expires_in=settings.PRESIGNED_DOWNLOAD_EXPIRES_IN)

    @route.get("/event-images/{uuid:event_id}", url_name="list_event_images", response=schema.EventImagesSchema)
    def list_event_images(self, event_id: UUID) -> schema.EventImagesSchema:
        """Keys of every image stored for an event visible to the caller."""
        keys = access_service.list_event_images(self.request_context(), event_id)
        return schema.EventImagesSchema(event_id=event_id, keys=keys)
