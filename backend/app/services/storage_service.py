# backend/app/services/storage_service.py
#   S3 access for posture/profile photos, scoped per identity.
import uuid
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from ..AWS_configuration import AWSConfig

PHOTO_CATEGORIES = {"posture", "profile"}


class StorageServiceError(Exception):
    """
    Raised when an S3 call fails or storage is not configured.

    Typical causes:
      - S3_BUCKET_NAME unset
      - Missing credentials or bucket permissions
      - Network failures
    """


def _get_s3_client():
    """
    Resolve the S3 client.

    Priority:
      1) current_app.config["S3_CLIENT"] if provided by app factory
      2) the shared boto3 client from AWSConfig
    """
    client = current_app.config.get("S3_CLIENT")
    if client:
        return client
    return AWSConfig.get_s3_client()


def _bucket() -> str:
    bucket = current_app.config.get("S3_BUCKET_NAME")
    if not bucket:
        raise StorageServiceError("S3 bucket is not configured")
    return bucket


def identity_prefix(category: str, identity: str) -> str:
    return f"{category}-photos/{identity}/"


def build_object_key(category: str, identity: str, file_extension: str) -> str:
    return f"{identity_prefix(category, identity)}{uuid.uuid4()}.{file_extension}"


def owns_key(identity: str, key: str) -> bool:
    """True when the key sits under one of the caller's own photo prefixes."""
    if not key or ".." in key:
        return False
    return any(key.startswith(identity_prefix(category, identity)) for category in PHOTO_CATEGORIES)


def generate_presigned_url(operation: str, object_key: str, expiration: int = 3600) -> str:
    """Pre-signed put_object/get_object URL for a single key."""
    try:
        return _get_s3_client().generate_presigned_url(
            operation,
            Params={'Bucket': _bucket(), 'Key': object_key},
            ExpiresIn=expiration
        )
    except (BotoCoreError, ClientError) as exc:
        current_app.logger.error({
            "component": "Storage",
            "event": "presign_failed",
            "operation": operation,
            "error": str(exc),
        })
        raise StorageServiceError(f"Could not sign {operation} URL") from exc


def upload_photo(fileobj, object_key: str, content_type: str) -> None:
    try:
        _get_s3_client().upload_fileobj(
            fileobj,
            _bucket(),
            object_key,
            ExtraArgs={"ContentType": content_type},
        )
    except (BotoCoreError, ClientError) as exc:
        current_app.logger.error({
            "component": "Storage",
            "event": "upload_failed",
            "key": object_key,
            "error": str(exc),
        })
        raise StorageServiceError("Upload failed") from exc


def list_photos(identity: str) -> List[Dict[str, Any]]:
    """All objects under the caller's posture and profile prefixes, newest first."""
    client = _get_s3_client()
    bucket = _bucket()
    items: List[Dict[str, Any]] = []
    try:
        for category in sorted(PHOTO_CATEGORIES):
            params = {"Bucket": bucket, "Prefix": identity_prefix(category, identity)}
            while True:
                resp = client.list_objects_v2(**params)
                for obj in resp.get("Contents", []):
                    modified = obj.get("LastModified")
                    items.append({
                        "key": obj["Key"],
                        "category": category,
                        "size": obj.get("Size"),
                        "last_modified": modified.isoformat() if hasattr(modified, "isoformat") else modified,
                    })
                if not resp.get("IsTruncated"):
                    break
                params["ContinuationToken"] = resp.get("NextContinuationToken")
    except (BotoCoreError, ClientError) as exc:
        current_app.logger.error({
            "component": "Storage",
            "event": "list_failed",
            "error": str(exc),
        })
        raise StorageServiceError("Could not list photos") from exc

    items.sort(key=lambda item: item["last_modified"] or "", reverse=True)
    return items
