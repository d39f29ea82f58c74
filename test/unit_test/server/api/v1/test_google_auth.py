from urllib.parse import parse_qs, urlparse

import pytest
from httpx import AsyncClient

from lingua_learn.server.core.config import GoogleOAuthConfig
from lingua_learn.server.main import app
from lingua_learn.server.services.google_oauth import GoogleOAuthClient, get_google_oauth_client

pytestmark = pytest.mark.asyncio


class FakeGoogleClient(GoogleOAuthClient):
    def __init__(self, profile):
        super().__init__(GoogleOAuthConfig(GOOGLE_CLIENT_ID="client-123"))
        self.profile = profile
        self.codes = []

    async def fetch_profile(self, code):
        self.codes.append(code)
        return self.profile


@pytest.fixture
def google(client):
    fake = FakeGoogleClient({"id": "g-42", "email": "Maria@gmail.com", "name": "Maria", "picture": "https://pic"})
    app.dependency_overrides[get_google_oauth_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_google_oauth_client, None)


async def test_authorization_url(client: AsyncClient, google):
    response = await client.get("/api/auth/google", params={"state": "xyz"})

    assert response.status_code == 200
    url = urlparse(response.json()["data"]["url"])
    query = parse_qs(url.query)
    assert url.netloc == "accounts.google.com"
    assert query["client_id"] == ["client-123"]
    assert query["scope"] == ["openid email profile"]
    assert query["state"] == ["xyz"]


async def test_callback_creates_learner(client: AsyncClient, google):
    response = await client.get("/api/auth/google/callback", params={"code": "auth-code"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert google.codes == ["auth-code"]
    assert data["user"]["email"] == "maria@gmail.com"
    assert data["user"]["role"] == "user"
    assert data["redirect_url"].endswith("/learn")


async def test_callback_links_existing_admin_by_email(client: AsyncClient, google, admin):
    google.profile = {"id": "g-7", "email": "ada@gmail.com"}
    admin.email = "ada@gmail.com"

    response = await client.get("/api/auth/google/callback", params={"code": "c"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == admin.id
    assert data["redirect_url"].endswith("/admin")


async def test_callback_rejects_other_domains(client: AsyncClient, google):
    google.profile = {"id": "g-9", "email": "someone@elsewhere.org"}

    response = await client.get("/api/auth/google/callback", params={"code": "c"})

    assert response.status_code == 403
    assert response.json()["message"] == "Email domain is not allowed."
