# tests/conftest.py
import io
import os

# precisa vir antes de importar catalog.main (cria o app no import)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AWS_BUCKET_NAME", "test-bucket")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from catalog.config import Settings
from catalog.infra.db import QueryGateway
from catalog.infra.models import create_schema
from catalog.infra.storage_s3 import ObjectStore
from catalog.main import create_app

BUCKET = "test-bucket"
REGION = "us-east-1"


def make_image(fmt: str = "JPEG", size=(48, 48), mode: str = "RGB") -> bytes:
    if mode == "RGBA":
        img = Image.new("RGBA", size, (10, 200, 30, 128))
    else:
        img = Image.effect_noise(size, 64).convert(mode)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        AWS_BUCKET_NAME=BUCKET,
        AWS_REGION=REGION,
        APP_ENV="test",
    )


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def gateway(engine):
    return QueryGateway(engine)


@pytest.fixture
def s3():
    client = MagicMock()
    client.put_object.return_value = {}
    client.delete_object.return_value = {}
    return client


@pytest.fixture
def store(s3):
    return ObjectStore(s3, bucket=BUCKET, region=REGION)


@pytest.fixture
def client(settings, gateway, store):
    app = create_app(settings, gateway=gateway, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(name="make_image")
def make_image_fixture():
    return make_image


@pytest.fixture
def jpeg_bytes():
    return make_image("JPEG")


@pytest.fixture
def png_bytes():
    return make_image("PNG", mode="RGBA")
