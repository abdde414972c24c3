"""Microsoft identity platform client for Outlook / Office 365 mail."""

from __future__ import annotations

from typing import Any

from ..config import CRMSettings
from .oauth import OAuthConfigError, OAuthError, OAuthProfile, OAuthProvider

MICROSOFT_AUTH_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/authorize"
MICROSOFT_TOKEN_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/token"
GRAPH_ME_URL = "https://graph.microsoft.com/v1.0/me?$select=id,displayName,mail,userPrincipalName"

OUTLOOK_SCOPES = ["offline_access", "Mail.ReadWrite", "Mail.Send", "User.Read"]


class OutlookOAuth(OAuthProvider):
    name = "Outlook"
    auth_url = MICROSOFT_AUTH_URL
    token_url = MICROSOFT_TOKEN_URL
    profile_url = GRAPH_ME_URL

    def _parse_profile(self, data: dict[str, Any]) -> OAuthProfile:
        # Personal accounts have no `mail`; fall back to the sign-in name.
        email = data.get("mail") or data.get("userPrincipalName")
        if not email:
            raise OAuthError(
                "Outlook profile has no email address",
                error_code="no_email",
                details={"response_keys": list(data.keys())},
            )
        return OAuthProfile(email=email, name=data.get("displayName"), provider_user_id=data.get("id"))


def outlook_client(settings_obj: CRMSettings) -> OutlookOAuth:
    if not settings_obj.microsoft_configured:
        raise OAuthConfigError("Microsoft OAuth is not configured")
    redirect_uri = f"{settings_obj.base_url}/api/integrations/outlook/callback"
    return OutlookOAuth(
        settings_obj.microsoft_client_id,
        settings_obj.microsoft_client_secret,
        redirect_uri,
        OUTLOOK_SCOPES,
        {"response_mode": "query", "prompt": "consent"},
    )
