"""OAuth 2.0 authorization-code client shared by the Google and Microsoft integrations.

Handles the parts of the flow the app needs:
1. Build the provider consent URL
2. Exchange the callback code for tokens
3. Look up the connected account's email/profile
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlencode

import httpx


class OAuthError(Exception):
    """OAuth-related error."""

    def __init__(self, message: str, error_code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class OAuthConfigError(OAuthError):
    """Provider credentials are missing from settings."""

    def __init__(self, message: str):
        super().__init__(message, error_code="not_configured")


@dataclass
class OAuthTokens:
    access_token: str
    refresh_token: str | None = None
    expires_in: int = 3600  # seconds
    token_type: str = "Bearer"
    scope: str = ""
    _issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def expires_at(self) -> datetime:
        return self._issued_at + timedelta(seconds=self.expires_in)


@dataclass
class OAuthProfile:
    email: str
    name: str | None = None
    provider_user_id: str | None = None


class OAuthProvider:
    """One OAuth application (client id/secret + endpoints + scopes)."""

    name = "oauth"
    auth_url = ""
    token_url = ""
    profile_url = ""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: list[str] | None = None,
        extra_params: dict[str, str] | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes or []
        self.extra_params = extra_params or {}

    def get_authorization_url(self, state: str | None = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
        }
        params.update(self.extra_params)
        if state:
            params["state"] = state
        return f"{self.auth_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> OAuthTokens:
        """Exchange an authorization code for tokens.

        Raises:
            OAuthError: If the provider rejects the code
        """
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                self.token_url,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )

            if response.status_code != 200:
                try:
                    error_data = response.json() if response.content else {}
                except ValueError:
                    error_data = {"raw_response": response.text[:500]}
                raise OAuthError(
                    f"{self.name} token exchange failed: {response.status_code}",
                    error_code=error_data.get("error", "exchange_failed"),
                    details=error_data,
                )

            return self._parse_token_response(response.json())

    async def fetch_profile(self, access_token: str) -> OAuthProfile:
        data = await self._get_json(self.profile_url, access_token, "profile")
        return self._parse_profile(data)

    async def _get_json(self, url: str, access_token: str, what: str) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.get(url, headers={"Authorization": f"Bearer {access_token}"})
            if response.status_code != 200:
                raise OAuthError(
                    f"Failed to fetch {self.name} {what}: {response.status_code}",
                    error_code=f"{what}_failed",
                    details={"status_code": response.status_code},
                )
            return response.json()

    def _parse_profile(self, data: dict[str, Any]) -> OAuthProfile:
        email = data.get("email")
        if not email:
            raise OAuthError(
                f"{self.name} profile has no email address",
                error_code="no_email",
                details={"response_keys": list(data.keys())},
            )
        return OAuthProfile(email=email, name=data.get("name"), provider_user_id=data.get("id"))

    def _parse_token_response(self, data: dict[str, Any]) -> OAuthTokens:
        try:
            return OAuthTokens(
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token"),
                expires_in=int(data.get("expires_in", 3600)),
                token_type=data.get("token_type", "Bearer"),
                scope=data.get("scope", ""),
            )
        except KeyError as e:
            raise OAuthError(
                f"Invalid token response: missing {e}",
                error_code="invalid_response",
                details={"missing_field": str(e), "response_keys": list(data.keys())},
            )
