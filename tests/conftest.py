"""
Shared fixtures: an in-memory Firestore, fast bcrypt, and a test client
wired the same way the lifespan wires the real app.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import app, init_services
from services.comments import CommentLog
from services.firestore import FirestoreDB
from services.posts import PostRepository
from services.tokens import TokenService
from services.users import UserService
from tests.fakes import FakeFirestoreClient
from utils.passwords import PasswordHasher

TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"


@pytest.fixture
def fake_client():
    return FakeFirestoreClient()


@pytest.fixture
def db(fake_client):
    return FirestoreDB(fake_client)


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET, expires_minutes=60)


@pytest.fixture(scope="session")
def hasher():
    # the minimum work factor keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def user_service(db, token_service, hasher):
    return UserService(db, token_service, hasher)


@pytest.fixture
def post_repository(db):
    return PostRepository(db)


@pytest.fixture
def comment_log(db):
    return CommentLog(db)


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.generate_presigned_url.return_value = "https://example-bucket.s3.amazonaws.com/signed"
    return client


@pytest.fixture
def settings():
    return Settings(jwt_secret_key=TEST_SECRET, bcrypt_rounds=4, s3_bucket_name="test-bucket")


@pytest.fixture
def client(settings, fake_client, s3_client):
    """Test client without the lifespan, so no Firebase or AWS credentials are needed"""
    init_services(app, settings, fake_client, s3_client)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def register(client):
    """Register a user through the API and return (user, headers)"""

    def _register(username: str, email: str = None, password: str = "s3cret-pass"):
        email = email or f"{username}@example.com"
        response = client.post(
            "/api/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register
