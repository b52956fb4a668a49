"""Audio object storage: S3-compatible bucket (Cloudflare R2) or local disk.

boto3 and file writes are blocking, so both run in asyncio.to_thread().
"""

import asyncio
from pathlib import Path

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from studykit.core.exceptions import GenerationError

logger = structlog.get_logger(__name__)


class S3AudioStorage:
    """AudioStorage writing to an S3-compatible bucket.

    Public URL: {public_base_url}/{key}
    """

    def __init__(
        self,
        bucket: str,
        public_base_url: str,
        endpoint_url: str | None = None,
        region: str = "auto",
        client=None,
    ) -> None:
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self._client = client or boto3.client("s3", endpoint_url=endpoint_url or None, region_name=region)

    async def upload(self, key: str, data: bytes, content_type: str = "audio/mpeg") -> str:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("audio_upload_failed", key=key, error=str(exc), error_type=type(exc).__name__)
            raise GenerationError("Failed to store audio", "audio") from exc

        url = f"{self.public_base_url}/{key}"
        logger.info("audio_uploaded", key=key, bytes=len(data))
        return url


class LocalAudioStorage:
    """AudioStorage writing under a local directory served as static files."""

    def __init__(self, root: str | Path, url_prefix: str = "/audio") -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def upload(self, key: str, data: bytes, content_type: str = "audio/mpeg") -> str:
        # Keys are "audio/<name>.mp3"; only the file name lands under root
        name = Path(key).name
        path = self.root / name
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as exc:
            logger.warning("audio_write_failed", path=str(path), error=str(exc))
            raise GenerationError("Failed to store audio", "audio") from exc
        return f"{self.url_prefix}/{name}"
