from decouple import config

BLOB_STORE_BACKEND = config("BLOB_STORE_BACKEND", default="common.storage.S3BlobStore")

AWS_REGION = config("AWS_REGION", default="us-east-1")
AWS_ACCESS_KEY_ID = config("AWS_ACCESS_KEY_ID", default=None)
AWS_SECRET_ACCESS_KEY = config("AWS_SECRET_ACCESS_KEY", default=None)
AWS_S3_BUCKET = config("AWS_S3_BUCKET", default="registrar-media")
AWS_S3_ENDPOINT_URL = config("AWS_S3_ENDPOINT_URL", default=None)

# Seconds
PRESIGNED_UPLOAD_EXPIRES_IN = config("PRESIGNED_UPLOAD_EXPIRES_IN", default=60, cast=int)
PRESIGNED_DOWNLOAD_EXPIRES_IN = config("PRESIGNED_DOWNLOAD_EXPIRES_IN", default=300, cast=int)
