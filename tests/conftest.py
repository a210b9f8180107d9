"""Shared pytest fixtures for all tests."""

import base64
import io

import bcrypt
import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from fragments.auth import HtpasswdAuthenticator
from fragments.main import create_app
from fragments.repositories import (
    FilesystemBlobStore,
    MemoryBlobStore,
    MemoryMetadataStore,
    S3BlobStore,
    SqliteMetadataStore,
    StorageBackend,
)

TEST_USERS = {
    "user1@email.com": "password1",
    "user2@email.com": "password2",
}


class FakeS3Client:
    """
    Minimal stand-in for a boto3 S3 client, keeping objects in a dict.
    """

    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body):
        self.objects[(Bucket, Key)] = bytes(Body)
        return {}

    def get_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)
        return {}


@pytest.fixture
def memory_backend():
    """
    Fresh in-memory storage backend.
    """
    return StorageBackend("memory", MemoryMetadataStore(), MemoryBlobStore())


@pytest.fixture
def sqlite_backend(tmp_path):
    """
    SQLite metadata + filesystem blob backend rooted in a temporary directory.
    """
    return StorageBackend(
        "sqlite",
        SqliteMetadataStore(str(tmp_path / "fragments.db")),
        FilesystemBlobStore(str(tmp_path / "blobs")),
    )


@pytest.fixture
def s3_backend(tmp_path):
    """
    SQLite metadata + S3 blob backend using an in-memory fake S3 client.
    """
    return StorageBackend(
        "s3",
        SqliteMetadataStore(str(tmp_path / "fragments.db")),
        S3BlobStore("fragments-test", client=FakeS3Client()),
    )


@pytest.fixture(params=["memory_backend", "sqlite_backend", "s3_backend"])
def backend(request):
    """
    Every storage backend implementation, one test run each.
    """
    return request.getfixturevalue(request.param)


@pytest.fixture(scope="session")
def htpasswd_file(tmp_path_factory):
    """
    htpasswd file with bcrypt hashes for TEST_USERS.
    """
    path = tmp_path_factory.mktemp("auth") / ".htpasswd"
    lines = [
        f"{username}:{bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=4)).decode()}"
        for username, password in TEST_USERS.items()
    ]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture(scope="session")
def authenticator(htpasswd_file):
    return HtpasswdAuthenticator.from_file(str(htpasswd_file))


@pytest.fixture
def client(memory_backend, authenticator):
    """
    Create FastAPI test client backed by in-memory storage.
    """
    return TestClient(create_app(backend=memory_backend, authenticator=authenticator))


def basic_auth(username: str, password: str) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def auth_headers():
    return basic_auth("user1@email.com", "password1")


@pytest.fixture
def other_auth_headers():
    return basic_auth("user2@email.com", "password2")
