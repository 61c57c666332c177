# catalog/infra/storage_s3.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote, unquote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from catalog.config import Settings
from catalog.errors import StoreDeleteError, StoreWriteError

logger = logging.getLogger(__name__)

# separa host do bucket e o path da key (https://<bucket>.s3.<region>.amazonaws.com/<key>)
URL_KEY_MARKER = ".com/"


def s3_client(settings: Settings):
    kwargs: dict[str, Any] = {
        "region_name": settings.AWS_REGION,
        "config": Config(signature_version="s3v4"),
    }
    if settings.S3_ENDPOINT:
        kwargs["endpoint_url"] = settings.S3_ENDPOINT.rstrip("/")
    # sem credenciais explicitas o boto3 usa a cadeia padrao (env, perfil, role)
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY

    return boto3.client("s3", **kwargs)


def key_from_url(url: Optional[str]) -> Optional[str]:
    """
    Recover the object key from a stored public URL.

    Takes everything after the first ".com/" and percent-decodes it. This is a
    textual convention tied to the AWS virtual-hosted URL format; URLs built
    for another host format will not round-trip.
    """
    if not url:
        return None
    _, sep, rest = url.partition(URL_KEY_MARKER)
    if not sep or not rest:
        return None
    return unquote(rest)


@dataclass(frozen=True)
class DeleteResult:
    key: str
    ok: bool
    error: Optional[StoreDeleteError] = None


class ObjectStore:
    def __init__(self, client, *, bucket: str, region: str, acl: Optional[str] = None):
        self.client = client
        self.bucket = (bucket or "").strip()
        self.region = region
        self.acl = acl

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStore":
        return cls(
            s3_client(settings),
            bucket=settings.AWS_BUCKET_NAME,
            region=settings.AWS_REGION,
            acl=settings.S3_OBJECT_ACL,
        )

    def public_url(self, key: str) -> str:
        key = key.lstrip("/")
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quote(key, safe='/')}"

    def _bucket(self) -> str:
        # valida so quando o bucket e usado; health e listagem nao dependem dele
        if not self.bucket:
            raise StoreWriteError("AWS_BUCKET_NAME not configured.")
        return self.bucket

    def put(self, key: str, data: bytes, content_type: str) -> str:
        bucket = self._bucket()
        if not data:
            raise StoreWriteError("empty object body")
        key = key.lstrip("/")

        params: dict[str, Any] = {
            "Bucket": bucket,
            "Key": key,
            "Body": data,
            "ContentType": content_type,
        }
        if self.acl:
            params["ACL"] = self.acl

        try:
            self.client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise StoreWriteError(f"S3 upload error: {e}") from e

        logger.info("stored s3://%s/%s (%d bytes)", bucket, key, len(data))
        return self.public_url(key)

    def delete(self, key: str) -> DeleteResult:
        key = (key or "").lstrip("/")
        if not key:
            return DeleteResult(key=key, ok=False, error=StoreDeleteError("empty key"))
        if not self.bucket:
            return DeleteResult(
                key=key,
                ok=False,
                error=StoreDeleteError("AWS_BUCKET_NAME not configured."),
            )
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            return DeleteResult(
                key=key,
                ok=False,
                error=StoreDeleteError(f"S3 delete error: {e}"),
            )
        return DeleteResult(key=key, ok=True)
