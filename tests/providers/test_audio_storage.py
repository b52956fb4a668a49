"""Tests for S3-compatible and local audio storage."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from studykit.core.exceptions import GenerationError
from studykit.providers.storage import LocalAudioStorage, S3AudioStorage

pytestmark = pytest.mark.unit


async def test_s3_upload_returns_public_url():
    client = MagicMock()
    storage = S3AudioStorage(bucket="audio", public_base_url="https://cdn.example.com/", client=client)

    url = await storage.upload("audio/c1.mp3", b"mp3")

    assert url == "https://cdn.example.com/audio/c1.mp3"
    client.put_object.assert_called_once_with(Bucket="audio", Key="audio/c1.mp3", Body=b"mp3", ContentType="audio/mpeg")


async def test_s3_client_error_becomes_generation_error():
    client = MagicMock()
    client.put_object.side_effect = ClientError({"Error": {"Code": "AccessDenied", "Message": "no"}}, "PutObject")
    storage = S3AudioStorage(bucket="audio", public_base_url="https://cdn.example.com", client=client)

    with pytest.raises(GenerationError):
        await storage.upload("audio/c1.mp3", b"mp3")


async def test_local_upload_writes_file(tmp_path):
    storage = LocalAudioStorage(tmp_path / "audio")

    url = await storage.upload("audio/c1.mp3", b"mp3")

    assert url == "/audio/c1.mp3"
    assert (tmp_path / "audio" / "c1.mp3").read_bytes() == b"mp3"
