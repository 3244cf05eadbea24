"""Tests for the local and S3 object stores."""

import io
import re
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from papermind.infrastructure.storage import LocalObjectStore, S3ObjectStore, build_storage_key, guess_extension
from papermind.modules.common.exceptions import (
    ConfigurationError,
    StorageConflictError,
    StorageError,
    StorageNotFoundError,
)


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_build_storage_key_layout():
    key = build_storage_key("user-1", "application/pdf")

    assert re.fullmatch(r"user-1/\d+-[0-9a-f]{16}\.pdf", key)
    assert build_storage_key("user-1", "application/pdf") != key


@pytest.mark.parametrize("namespace", ["", "../etc", "a/b", "a..b"])
def test_build_storage_key_rejects_unsafe_namespace(namespace: str):
    with pytest.raises(StorageError):
        build_storage_key(namespace, "application/pdf")


def test_guess_extension():
    assert guess_extension("image/JPEG") == ".jpg"
    assert guess_extension("application/octet-stream") == ".bin"


@pytest.mark.asyncio
async def test_local_store_round_trip(tmp_path):
    store = LocalObjectStore(tmp_path)

    key = await store.put("alice", b"%PDF-1.7", "application/pdf")

    assert key.startswith("alice/")
    assert await store.exists(key)
    assert await store.get(key) == b"%PDF-1.7"

    await store.delete(key)
    assert not await store.exists(key)


@pytest.mark.asyncio
async def test_local_store_never_overwrites(tmp_path):
    store = LocalObjectStore(tmp_path)
    await store._write("alice/fixed.pdf", b"first", "application/pdf")

    with pytest.raises(StorageConflictError):
        await store._write("alice/fixed.pdf", b"second", "application/pdf")

    assert await store.get("alice/fixed.pdf") == b"first"


@pytest.mark.asyncio
async def test_local_store_missing_object(tmp_path):
    store = LocalObjectStore(tmp_path)

    with pytest.raises(StorageNotFoundError):
        await store.get("alice/missing.pdf")
    with pytest.raises(StorageNotFoundError):
        await store.delete("alice/missing.pdf")


@pytest.mark.asyncio
async def test_local_store_rejects_escaping_keys(tmp_path):
    store = LocalObjectStore(tmp_path / "root")

    with pytest.raises(StorageError):
        await store.get("../outside.pdf")


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.head_object.side_effect = client_error("404", "HeadObject")
    return client


@pytest.mark.asyncio
async def test_s3_store_put(s3_client):
    store = S3ObjectStore(bucket="papermind-test", client=s3_client)

    key = await store.put("alice", b"bytes", "image/png")

    s3_client.put_object.assert_called_once_with(Bucket="papermind-test", Key=key, Body=b"bytes", ContentType="image/png")
    assert key.endswith(".png")


@pytest.mark.asyncio
async def test_s3_store_put_conflict(s3_client):
    s3_client.head_object.side_effect = None
    store = S3ObjectStore(bucket="papermind-test", client=s3_client)

    with pytest.raises(StorageConflictError):
        await store.put("alice", b"bytes", "image/png")
    s3_client.put_object.assert_not_called()


@pytest.mark.asyncio
async def test_s3_store_get(s3_client):
    s3_client.get_object.return_value = {"Body": io.BytesIO(b"stored")}
    store = S3ObjectStore(bucket="papermind-test", client=s3_client)

    assert await store.get("alice/1-a.pdf") == b"stored"


@pytest.mark.asyncio
async def test_s3_store_get_missing(s3_client):
    s3_client.get_object.side_effect = client_error("NoSuchKey", "GetObject")
    store = S3ObjectStore(bucket="papermind-test", client=s3_client)

    with pytest.raises(StorageNotFoundError):
        await store.get("alice/1-a.pdf")


@pytest.mark.asyncio
async def test_s3_store_get_access_denied(s3_client):
    s3_client.get_object.side_effect = client_error("AccessDenied", "GetObject")
    store = S3ObjectStore(bucket="papermind-test", client=s3_client)

    with pytest.raises(StorageError) as exc_info:
        await store.get("alice/1-a.pdf")
    assert not isinstance(exc_info.value, StorageNotFoundError)


@pytest.mark.asyncio
async def test_s3_store_delete(s3_client):
    store = S3ObjectStore(bucket="papermind-test", client=s3_client)

    with pytest.raises(StorageNotFoundError):
        await store.delete("alice/1-a.pdf")

    s3_client.head_object.side_effect = None
    await store.delete("alice/1-a.pdf")
    s3_client.delete_object.assert_called_once_with(Bucket="papermind-test", Key="alice/1-a.pdf")


def test_s3_store_requires_bucket():
    with pytest.raises(ConfigurationError):
        S3ObjectStore(bucket="", client=MagicMock())
