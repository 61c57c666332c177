import re

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from catalog.errors import StoreDeleteError, StoreWriteError
from catalog.infra.storage_s3 import ObjectStore, key_from_url
from catalog.services import id_gen
from catalog.services.id_gen import generate_object_key


def _client_error(op: str, code: str = "AccessDenied") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "denied"}}, op)


def test_public_url_format(store):
    url = store.public_url("products/1700000000000-42.webp")
    assert url == "https://test-bucket.s3.us-east-1.amazonaws.com/products/1700000000000-42.webp"


@pytest.mark.parametrize(
    "key",
    [
        "products/1700000000000-42.webp",
        "products/1700000000000-999999999.webp",
        "products/0-0.jpg",
        "products/with space.png",
    ],
)
def test_key_from_url_inverts_public_url(store, key):
    assert key_from_url(store.public_url(key)) == key


def test_key_from_url_inverts_generated_keys(store):
    for _ in range(20):
        key = generate_object_key()
        assert key_from_url(store.public_url(key)) == key


@pytest.mark.parametrize("url", [None, "", "https://cdn.example.dev/products/a.webp", "https://x.com/"])
def test_key_from_url_without_marker(url):
    assert key_from_url(url) is None


def test_key_from_url_uses_first_marker():
    assert key_from_url("https://b.s3.r.amazonaws.com/products/a.com/b.webp") == "products/a.com/b.webp"


def test_put_uploads_and_returns_url(store, s3):
    url = store.put("products/1-2.webp", b"RIFFdata", "image/webp")

    s3.put_object.assert_called_once_with(
        Bucket="test-bucket",
        Key="products/1-2.webp",
        Body=b"RIFFdata",
        ContentType="image/webp",
    )
    assert url == store.public_url("products/1-2.webp")


def test_put_passes_acl_when_configured(s3):
    store = ObjectStore(s3, bucket="b", region="eu-west-1", acl="public-read")
    store.put("products/k.webp", b"x", "image/webp")
    assert s3.put_object.call_args.kwargs["ACL"] == "public-read"


@pytest.mark.parametrize(
    "exc",
    [_client_error("PutObject"), EndpointConnectionError(endpoint_url="https://s3")],
)
def test_put_failure_raises_store_write_error(store, s3, exc):
    s3.put_object.side_effect = exc
    with pytest.raises(StoreWriteError):
        store.put("products/k.webp", b"x", "image/webp")


def test_put_empty_body_is_rejected(store, s3):
    with pytest.raises(StoreWriteError):
        store.put("products/k.webp", b"", "image/webp")
    s3.put_object.assert_not_called()


def test_delete_ok(store, s3):
    result = store.delete("products/k.webp")
    assert result.ok
    assert result.error is None
    s3.delete_object.assert_called_once_with(Bucket="test-bucket", Key="products/k.webp")


def test_delete_failure_is_returned_not_raised(store, s3):
    s3.delete_object.side_effect = _client_error("DeleteObject")

    result = store.delete("products/k.webp")

    assert not result.ok
    assert isinstance(result.error, StoreDeleteError)
    assert result.key == "products/k.webp"
    assert s3.delete_object.call_count == 1


def test_missing_bucket_fails_only_when_used(s3):
    store = ObjectStore(s3, bucket="", region="us-east-1")

    with pytest.raises(StoreWriteError):
        store.put("products/k.webp", b"x", "image/webp")
    result = store.delete("products/k.webp")

    assert not result.ok
    assert isinstance(result.error, StoreDeleteError)
    s3.put_object.assert_not_called()
    s3.delete_object.assert_not_called()


def test_generated_key_format():
    key = generate_object_key("products", ".webp")
    assert re.fullmatch(r"products/\d+-\d{1,9}\.webp", key)


def test_generated_key_timestamps_never_go_back(monkeypatch):
    clock = iter([2_000_000, 1_000_000, 3_000_000])
    monkeypatch.setattr(id_gen, "_wall_clock_ms", lambda: next(clock))
    monkeypatch.setattr(id_gen, "_last_ms", 0)

    stamps = [int(generate_object_key().split("/")[1].split("-")[0]) for _ in range(3)]

    assert stamps == [2_000_000, 2_000_000, 3_000_000]
