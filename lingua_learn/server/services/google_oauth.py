"""
Google OAuth client.

Builds the consent URL and performs the server-side authorization code
exchange followed by a userinfo lookup.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from lingua_learn.core.errors import AuthenticationError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.server.core.config import GoogleOAuthConfig, settings

logger = get_logger(__name__)

SCOPES = ("openid", "email", "profile")


class GoogleOAuthClient:
    def __init__(self, config: Optional[GoogleOAuthConfig] = None, timeout: float = 10.0) -> None:
        self.config = config or settings.google
        self.timeout = timeout

    def authorization_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.config.client_id or "",
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "online",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state
        return f"{self.config.auth_url}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> Dict[str, Any]:
        """Exchange ``code`` for an access token and return the Google userinfo."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            token_response = await client.post(
                self.config.token_url,
                data={
                    "code": code,
                    "client_id": self.config.client_id or "",
                    "client_secret": self.config.client_secret or "",
                    "redirect_uri": self.config.redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            if token_response.status_code != 200:
                logger.warning(f"Google token exchange failed with status {token_response.status_code}")
                raise AuthenticationError("Failed to authenticate with Google.")
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise AuthenticationError("Failed to authenticate with Google.")

            profile_response = await client.get(
                self.config.userinfo_url, headers={"Authorization": f"Bearer {access_token}"}
            )
            if profile_response.status_code != 200:
                logger.warning(f"Google userinfo lookup failed with status {profile_response.status_code}")
                raise AuthenticationError("Failed to authenticate with Google.")
            return profile_response.json()


def get_google_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()
