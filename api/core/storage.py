"""
Object storage backends.

Submissions store uploaded files through a `StorageBackend`. The concrete
backend is picked by `STORAGE_BACKEND`:

- `s3`    -> any S3-compatible service (AWS S3, iDrive E2, Backblaze B2, MinIO)
             addressed by endpoint URL + access/secret key + bucket.
- `local` -> files on local disk; signed URLs are served by `api/media/`.

Object keys are bucket-relative paths like `images/<uuid>.png`. The database
stores keys, never URLs, so URLs can be re-signed at read time.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from urllib.parse import quote

import boto3
import jwt
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .env import env_bool, env_int

logger = logging.getLogger(__name__)

DEFAULT_PRESIGN_EXPIRE_MIN = 60
MEDIA_TOKEN_TYPE = "media"

_backend: StorageBackend | None = None


class StorageError(RuntimeError):
    pass


class StorageConfigError(StorageError):
    pass


def _require_env(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        raise StorageConfigError(f"{name} is not set.")
    return value


def presign_expire_seconds() -> int:
    minutes = env_int("STORAGE_PRESIGN_EXPIRE_MIN", DEFAULT_PRESIGN_EXPIRE_MIN)
    if minutes <= 0:
        minutes = DEFAULT_PRESIGN_EXPIRE_MIN
    return minutes * 60


def build_object_key(folder: str, filename: str | None) -> str:
    """
    Random, collision-free key under `folder`, keeping the original extension.
    """
    folder = (folder or "").strip().strip("/")
    if not folder:
        raise StorageError("Object folder is empty.")
    ext = PurePosixPath(filename or "").suffix.lower()
    return f"{folder}/{uuid.uuid4().hex}{ext}"


class StorageBackend(ABC):
    name = "abstract"

    @abstractmethod
    def put_object(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        """Store `data` under `key` and return the object's URL."""

    @abstractmethod
    def presigned_url(self, key: str, *, expires_in: int) -> str:
        """Return a GET URL for `key` that stops working after `expires_in` seconds."""

    @abstractmethod
    def delete_object(self, key: str) -> None:
        ...

    @abstractmethod
    def public_url(self, key: str) -> str:
        ...


class S3Storage(StorageBackend):
    name = "s3"

    def __init__(
        self,
        *,
        bucket: str,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        region: str = "us-east-1",
        public_url_prefix: str | None = None,
        public_read: bool = True,
        client=None,
    ) -> None:
        self.bucket = bucket
        self.endpoint_url = endpoint_url.rstrip("/")
        self.public_read = public_read
        self.public_url_prefix = (public_url_prefix or f"{self.endpoint_url}/{bucket}").rstrip("/")
        # Most S3-compatible providers only support path-style addressing.
        self._client = client or boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )

    def put_object(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "ContentType": content_type or "application/octet-stream",
        }
        if self.public_read:
            params["ACL"] = "public-read"

        try:
            self._client.put_object(**params)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Upload failed for key {key}.") from exc
        return self.public_url(key)

    def presigned_url(self, key: str, *, expires_in: int) -> str:
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=int(expires_in),
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Could not sign URL for key {key}.") from exc

    def delete_object(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Delete failed for key {key}.") from exc

    def public_url(self, key: str) -> str:
        return f"{self.public_url_prefix}/{quote(key, safe='/')}"


class LocalStorage(StorageBackend):
    """
    Disk-backed storage for development and single-host deployments.

    Signed URLs point at `/api/media/<key>?token=<jwt>`; the token carries the
    key and an expiry and is checked by `verify_media_token`.
    """

    name = "local"

    def __init__(
        self,
        *,
        root: str | Path,
        signing_secret: str,
        base_path: str = "/api/media",
        public_read: bool = True,
    ) -> None:
        self.root = Path(root).resolve()
        self.signing_secret = signing_secret
        self.base_path = base_path.rstrip("/")
        self.public_read = public_read

    def path_for(self, key: str) -> Path:
        parts = PurePosixPath(key or "").parts
        if not parts or key.startswith("/") or "\\" in key or ".." in parts:
            raise StorageError(f"Invalid object key: {key!r}")
        return self.root.joinpath(*parts)

    def put_object(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Upload failed for key {key}.") from exc
        return self.public_url(key)

    def presigned_url(self, key: str, *, expires_in: int) -> str:
        self.path_for(key)
        payload = {
            "key": key,
            "type": MEDIA_TOKEN_TYPE,
            "exp": int(time.time()) + int(expires_in),
        }
        token = jwt.encode(payload, self.signing_secret, algorithm="HS256")
        return f"{self.public_url(key)}?token={token}"

    def verify_media_token(self, key: str, token: str) -> bool:
        try:
            payload = jwt.decode(token, self.signing_secret, algorithms=["HS256"])
        except jwt.InvalidTokenError:
            return False
        return payload.get("type") == MEDIA_TOKEN_TYPE and payload.get("key") == key

    def delete_object(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Delete failed for key {key}.") from exc

    def public_url(self, key: str) -> str:
        return f"{self.base_path}/{quote(key, safe='/')}"


def storage_from_env() -> StorageBackend:
    """
    Build the configured backend. Missing S3 settings fail here, at startup.
    """
    backend = os.environ.get("STORAGE_BACKEND", "local").strip().lower() or "local"
    public_read = env_bool("STORAGE_PUBLIC_READ", True)

    if backend == "s3":
        return S3Storage(
            bucket=_require_env("STORAGE_BUCKET"),
            endpoint_url=_require_env("STORAGE_ENDPOINT_URL"),
            access_key=_require_env("STORAGE_ACCESS_KEY"),
            secret_key=_require_env("STORAGE_SECRET_KEY"),
            region=os.environ.get("STORAGE_REGION", "").strip() or "us-east-1",
            public_url_prefix=os.environ.get("STORAGE_PUBLIC_URL_PREFIX", "").strip() or None,
            public_read=public_read,
        )

    if backend == "local":
        secret = (
            os.environ.get("STORAGE_SIGNING_SECRET", "").strip()
            or os.environ.get("JWT_SECRET", "").strip()
            or "dev-change-this-secret"
        )
        return LocalStorage(
            root=os.environ.get("STORAGE_LOCAL_DIR", "").strip() or "./uploads",
            signing_secret=secret,
            public_read=public_read,
        )

    raise StorageConfigError(f"Unknown STORAGE_BACKEND '{backend}'. Use 's3' or 'local'.")


def init_storage() -> StorageBackend:
    global _backend
    if _backend is None:
        _backend = storage_from_env()
        logger.info("storage_ready backend=%s", _backend.name)
    return _backend


def reset_storage() -> None:
    global _backend
    _backend = None


def get_storage() -> StorageBackend:
    """
    FastAPI dependency. Tests override it via `app.dependency_overrides`.
    """
    return init_storage()
