"""Google OAuth clients: Calendar, Gmail and Business Profile (GMB)."""

from __future__ import annotations

from typing import Any

from ..config import CRMSettings
from .oauth import OAuthConfigError, OAuthProvider

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GMB_ACCOUNTS_URL = "https://mybusinessaccountmanagement.googleapis.com/v1/accounts"
GMB_LOCATIONS_URL = (
    "https://mybusinessbusinessinformation.googleapis.com/v1/accounts/{account_id}/locations"
)

CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
]
GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.settings.basic",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]
GMB_SCOPES = [
    "https://www.googleapis.com/auth/business.manage",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

# Offline access + forced consent so Google always returns a refresh token.
_CONSENT_PARAMS = {"access_type": "offline", "prompt": "consent"}


class GoogleOAuth(OAuthProvider):
    name = "Google"
    auth_url = GOOGLE_AUTH_URL
    token_url = GOOGLE_TOKEN_URL
    profile_url = GOOGLE_USERINFO_URL


class GoogleBusinessOAuth(GoogleOAuth):
    name = "Google Business Profile"

    async def list_accounts(self, access_token: str) -> list[dict[str, Any]]:
        data = await self._get_json(GMB_ACCOUNTS_URL, access_token, "accounts")
        return data.get("accounts") or []

    async def list_locations(self, access_token: str, account_id: str) -> list[dict[str, Any]]:
        url = GMB_LOCATIONS_URL.format(account_id=account_id)
        url += "?readMask=name,title,phoneNumbers,websiteUri,storefrontAddress"
        data = await self._get_json(url, access_token, "locations")
        return data.get("locations") or []


def _credentials(settings_obj: CRMSettings) -> tuple[str, str]:
    if not settings_obj.google_configured:
        raise OAuthConfigError("Google OAuth is not configured")
    return settings_obj.google_client_id, settings_obj.google_client_secret


def google_calendar_client(settings_obj: CRMSettings) -> GoogleOAuth:
    client_id, client_secret = _credentials(settings_obj)
    redirect_uri = (
        settings_obj.google_redirect_uri or f"{settings_obj.base_url}/api/auth/google/callback"
    )
    return GoogleOAuth(
        client_id, client_secret, redirect_uri, CALENDAR_SCOPES, dict(_CONSENT_PARAMS)
    )


def gmail_client(settings_obj: CRMSettings) -> GoogleOAuth:
    client_id, client_secret = _credentials(settings_obj)
    redirect_uri = f"{settings_obj.base_url}/api/integrations/gmail/callback"
    return GoogleOAuth(client_id, client_secret, redirect_uri, GMAIL_SCOPES, dict(_CONSENT_PARAMS))


def gmb_client(settings_obj: CRMSettings) -> GoogleBusinessOAuth:
    client_id, client_secret = _credentials(settings_obj)
    redirect_uri = f"{settings_obj.base_url}/api/integrations/gmb/callback"
    return GoogleBusinessOAuth(
        client_id, client_secret, redirect_uri, GMB_SCOPES, dict(_CONSENT_PARAMS)
    )


def resource_id(resource_name: str) -> str:
    """Trailing id of a resource name such as ``accounts/123`` or ``locations/456``."""
    return (resource_name or "").rstrip("/").rsplit("/", 1)[-1]
