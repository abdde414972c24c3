"""OAuth initiate, disconnect and callback routes."""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select

from detail_crm.integrations.google import GoogleBusinessOAuth, GoogleOAuth
from detail_crm.integrations.microsoft import OutlookOAuth
from detail_crm.integrations.oauth import OAuthError, OAuthProfile, OAuthTokens
from detail_crm.models import EmailIntegration, GmbIntegration, GoogleCalendarIntegration


def _query(url: str) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


async def _mailboxes(db, user_id) -> list[EmailIntegration]:
    result = await db.execute(
        select(EmailIntegration).where(EmailIntegration.user_id == user_id)
    )
    return list(result.scalars().all())


@pytest_asyncio.fixture
async def mailboxes(db, user, other_user):
    rows = {
        "gmail_a": EmailIntegration(
            user_id=user.id, provider="gmail", email_address="a@gmail.com", access_token="t",
        ),
        "gmail_b": EmailIntegration(
            user_id=user.id, provider="gmail", email_address="b@gmail.com", access_token="t",
        ),
        "outlook": EmailIntegration(
            user_id=user.id, provider="outlook", email_address="me@outlook.com", access_token="t",
        ),
        "office365": EmailIntegration(
            user_id=user.id, provider="office365", email_address="me@corp.com", access_token="t",
        ),
        "other_gmail": EmailIntegration(
            user_id=other_user.id, provider="gmail", email_address="x@gmail.com", access_token="t",
        ),
    }
    db.add_all(rows.values())
    await db.commit()
    return rows


# ── Initiate ──────────────────────────────────────────────────────────────

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, body",
    [
        ("/api/auth/google/initiate", {"error": "Unauthorized"}),
        ("/api/integrations/gmail/auth", {"error": "Not authenticated"}),
        ("/api/integrations/gmb/auth", {"error": "Not authenticated"}),
        ("/api/integrations/outlook/auth", {"error": "Not authenticated"}),
    ],
)
async def test_initiate_requires_session(client: AsyncClient, oauth_configured, path, body):
    resp = await client.get(path)
    assert resp.status_code == 401
    assert resp.json() == body


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, body",
    [
        ("/api/auth/google/disconnect", {"error": "Unauthorized"}),
        ("/api/integrations/gmail/disconnect", {"error": "Not authenticated"}),
        ("/api/integrations/outlook/disconnect", {"error": "Not authenticated"}),
    ],
)
async def test_disconnect_requires_session(client: AsyncClient, path, body):
    resp = await client.post(path)
    assert resp.status_code == 401
    assert resp.json() == body


@pytest.mark.asyncio
async def test_google_calendar_initiate(signed_in: AsyncClient, oauth_configured, user):
    resp = await signed_in.get("/api/auth/google/initiate")
    assert resp.status_code == 200
    url = resp.json()["authUrl"]
    assert url.startswith("https://accounts.google.com/o/oauth2/v2/auth?")

    params = _query(url)
    assert params["client_id"] == "google-client-id"
    assert params["redirect_uri"] == "http://localhost:3000/api/auth/google/callback"
    assert params["access_type"] == "offline"
    assert params["prompt"] == "consent"
    assert params["state"] == str(user.id)
    assert "https://www.googleapis.com/auth/calendar.events" in params["scope"].split(" ")


@pytest.mark.asyncio
async def test_google_calendar_initiate_uses_configured_redirect(
    signed_in: AsyncClient, oauth_configured, monkeypatch
):
    monkeypatch.setattr(oauth_configured, "google_redirect_uri", "https://crm.example/cb")
    resp = await signed_in.get("/api/auth/google/initiate")
    assert _query(resp.json()["authUrl"])["redirect_uri"] == "https://crm.example/cb"


@pytest.mark.asyncio
async def test_gmail_initiate(signed_in: AsyncClient, oauth_configured):
    resp = await signed_in.get("/api/integrations/gmail/auth")
    params = _query(resp.json()["authUrl"])
    assert params["redirect_uri"] == "http://localhost:3000/api/integrations/gmail/callback"
    assert "https://www.googleapis.com/auth/gmail.send" in params["scope"].split(" ")


@pytest.mark.asyncio
async def test_gmb_initiate(signed_in: AsyncClient, oauth_configured, user):
    resp = await signed_in.get("/api/integrations/gmb/auth")
    params = _query(resp.json()["authUrl"])
    assert params["redirect_uri"] == "http://localhost:3000/api/integrations/gmb/callback"
    assert "https://www.googleapis.com/auth/business.manage" in params["scope"].split(" ")
    assert params["state"] == str(user.id)


@pytest.mark.asyncio
async def test_outlook_initiate(signed_in: AsyncClient, oauth_configured):
    resp = await signed_in.get("/api/integrations/outlook/auth")
    url = resp.json()["authUrl"]
    assert url.startswith("https://login.microsoftonline.com/common/oauth2/v2.0/authorize?")
    params = _query(url)
    assert params["client_id"] == "ms-client-id"
    assert params["response_mode"] == "query"
    assert params["scope"] == "offline_access Mail.ReadWrite Mail.Send User.Read"


@pytest.mark.asyncio
async def test_initiate_in_production_uses_production_url(
    signed_in: AsyncClient, oauth_configured, monkeypatch
):
    monkeypatch.setattr(oauth_configured, "environment", "production")
    monkeypatch.setattr(oauth_configured, "production_url", "https://crm.detaildynamics.example")
    resp = await signed_in.get("/api/integrations/outlook/auth")
    assert _query(resp.json()["authUrl"])["redirect_uri"] == (
        "https://crm.detaildynamics.example/api/integrations/outlook/callback"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, message",
    [
        ("/api/auth/google/initiate", "Google OAuth is not configured"),
        ("/api/integrations/gmail/auth", "Failed to initiate Gmail authentication"),
        ("/api/integrations/gmb/auth", "Google OAuth is not configured"),
        ("/api/integrations/outlook/auth", "Failed to initiate Outlook authentication"),
    ],
)
async def test_initiate_without_credentials(signed_in: AsyncClient, path, message):
    resp = await signed_in.get(path)
    assert resp.status_code == 500
    assert resp.json() == {"error": message}


# ── Disconnect ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_google_disconnect_removes_only_own_rows(signed_in: AsyncClient, db, user, other_user):
    db.add_all([
        GoogleCalendarIntegration(user_id=user.id, email="a@gmail.com", access_token="t"),
        GoogleCalendarIntegration(user_id=user.id, email="b@gmail.com", access_token="t"),
        GoogleCalendarIntegration(user_id=other_user.id, email="c@gmail.com", access_token="t"),
    ])
    await db.commit()

    resp = await signed_in.post("/api/auth/google/disconnect")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    remaining = (await db.execute(select(GoogleCalendarIntegration))).scalars().all()
    assert [row.email for row in remaining] == ["c@gmail.com"]


@pytest.mark.asyncio
async def test_gmail_disconnect_all(signed_in: AsyncClient, db, user, other_user, mailboxes):
    resp = await signed_in.post("/api/integrations/gmail/disconnect")
    assert resp.json() == {"success": True}

    mine = await _mailboxes(db, user.id)
    assert sorted(row.provider for row in mine) == ["office365", "outlook"]
    assert len(await _mailboxes(db, other_user.id)) == 1


@pytest.mark.asyncio
async def test_gmail_disconnect_one(signed_in: AsyncClient, db, user, mailboxes):
    target = mailboxes["gmail_a"].id
    resp = await signed_in.post(
        "/api/integrations/gmail/disconnect", json={"integrationId": str(target)}
    )
    assert resp.json() == {"success": True}

    emails = sorted(row.email_address for row in await _mailboxes(db, user.id))
    assert emails == ["b@gmail.com", "me@corp.com", "me@outlook.com"]


@pytest.mark.asyncio
async def test_gmail_disconnect_ignores_other_users_row(
    signed_in: AsyncClient, db, other_user, mailboxes
):
    target = mailboxes["other_gmail"].id
    resp = await signed_in.post(
        "/api/integrations/gmail/disconnect", json={"integrationId": str(target)}
    )
    assert resp.json() == {"success": True}
    assert len(await _mailboxes(db, other_user.id)) == 1


@pytest.mark.asyncio
async def test_gmail_disconnect_cannot_remove_outlook_row(
    signed_in: AsyncClient, db, user, mailboxes
):
    target = mailboxes["outlook"].id
    await signed_in.post("/api/integrations/gmail/disconnect", json={"integrationId": str(target)})
    assert len(await _mailboxes(db, user.id)) == 4


@pytest.mark.asyncio
async def test_outlook_disconnect_covers_office365(signed_in: AsyncClient, db, user, mailboxes):
    resp = await signed_in.post("/api/integrations/outlook/disconnect")
    assert resp.json() == {"success": True}

    mine = await _mailboxes(db, user.id)
    assert sorted(row.email_address for row in mine) == ["a@gmail.com", "b@gmail.com"]


@pytest.mark.asyncio
async def test_outlook_disconnect_one(signed_in: AsyncClient, db, user, mailboxes):
    target = mailboxes["office365"].id
    await signed_in.post(
        "/api/integrations/outlook/disconnect", json={"integrationId": str(target)}
    )
    providers = sorted(row.provider for row in await _mailboxes(db, user.id))
    assert providers == ["gmail", "gmail", "outlook"]


@pytest.mark.asyncio
async def test_disconnect_with_invalid_id(signed_in: AsyncClient, mailboxes):
    resp = await signed_in.post(
        "/api/integrations/gmail/disconnect", json={"integrationId": "not-a-uuid"}
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to disconnect Gmail"}


@pytest.mark.asyncio
async def test_disconnect_with_malformed_body(signed_in: AsyncClient):
    resp = await signed_in.post(
        "/api/integrations/outlook/disconnect",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_disconnect_unknown_id_is_not_an_error(signed_in: AsyncClient, db, user, mailboxes):
    resp = await signed_in.post(
        "/api/integrations/gmail/disconnect", json={"integrationId": str(uuid.uuid4())}
    )
    assert resp.json() == {"success": True}
    assert len(await _mailboxes(db, user.id)) == 4


# ── Callbacks ─────────────────────────────────────────────────────────────

TOKENS = OAuthTokens(access_token="access-1", refresh_token="refresh-1", expires_in=3600)


@pytest.mark.asyncio
async def test_google_calendar_callback_saves_integration(
    signed_in: AsyncClient, oauth_configured, db, user
):
    with patch.object(GoogleOAuth, "exchange_code", AsyncMock(return_value=TOKENS)) as exchange, \
         patch.object(
             GoogleOAuth, "fetch_profile",
             AsyncMock(return_value=OAuthProfile(email="shop@gmail.com")),
         ):
        resp = await signed_in.get(
            f"/api/auth/google/callback?code=abc&state={user.id}", follow_redirects=False
        )

    assert resp.status_code == 303
    assert resp.headers["location"] == "/settings?tab=integrations&success=google_connected"
    exchange.assert_awaited_once_with("abc")

    rows = (await db.execute(select(GoogleCalendarIntegration))).scalars().all()
    assert len(rows) == 1
    assert rows[0].email == "shop@gmail.com"
    assert rows[0].refresh_token == "refresh-1"
    assert rows[0].user_id == user.id


@pytest.mark.asyncio
async def test_google_calendar_callback_rejects_foreign_state(signed_in: AsyncClient, oauth_configured):
    resp = await signed_in.get(
        f"/api/auth/google/callback?code=abc&state={uuid.uuid4()}", follow_redirects=False
    )
    assert resp.headers["location"] == "/settings?tab=integrations&error=unauthorized"


@pytest.mark.asyncio
async def test_google_calendar_callback_denied(signed_in: AsyncClient):
    resp = await signed_in.get(
        "/api/auth/google/callback?error=access_denied", follow_redirects=False
    )
    assert resp.headers["location"] == "/settings?tab=integrations&error=google_auth_denied"


@pytest.mark.asyncio
async def test_gmail_callback_saves_and_refreshes(
    signed_in: AsyncClient, oauth_configured, db, user
):
    profile = OAuthProfile(email="shop@gmail.com", name="Shop", provider_user_id="g-1")
    first = OAuthTokens(access_token="a1", refresh_token="r1")
    second = OAuthTokens(access_token="a2", refresh_token=None)

    with patch.object(GoogleOAuth, "exchange_code", AsyncMock(side_effect=[first, second])), \
         patch.object(GoogleOAuth, "fetch_profile", AsyncMock(return_value=profile)):
        for _ in range(2):
            resp = await signed_in.get(
                f"/api/integrations/gmail/callback?code=c&state={user.id}",
                follow_redirects=False,
            )
            assert resp.headers["location"] == "/settings?tab=integrations&success=gmail_connected"

    rows = await _mailboxes(db, user.id)
    assert len(rows) == 1
    await db.refresh(rows[0])
    assert rows[0].access_token == "a2"
    assert rows[0].refresh_token == "r1"
    assert rows[0].display_name == "Shop"


@pytest.mark.asyncio
async def test_outlook_callback_exchange_failure(signed_in: AsyncClient, oauth_configured, user):
    failing = AsyncMock(side_effect=OAuthError("Outlook token exchange failed: 400"))
    with patch.object(OutlookOAuth, "exchange_code", failing):
        resp = await signed_in.get(
            f"/api/integrations/outlook/callback?code=c&state={user.id}", follow_redirects=False
        )
    assert resp.headers["location"] == "/settings?tab=integrations&error=callback_failed"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "query, location",
    [
        ("error=access_denied", "/settings?tab=integrations&error=outlook_auth_failed"),
        ("", "/settings?tab=integrations&error=no_code"),
    ],
)
async def test_outlook_callback_errors(signed_in: AsyncClient, query, location):
    resp = await signed_in.get(
        f"/api/integrations/outlook/callback?{query}", follow_redirects=False
    )
    assert resp.headers["location"] == location


@pytest.mark.asyncio
async def test_mailbox_callback_without_session(client: AsyncClient):
    resp = await client.get("/api/integrations/gmail/callback?code=c", follow_redirects=False)
    assert resp.headers["location"] == "/login?error=not_authenticated"


@pytest.mark.asyncio
async def test_gmb_callback_saves_first_location(
    signed_in: AsyncClient, oauth_configured, db, user
):
    accounts = [{"name": "accounts/111"}]
    locations = [{"name": "locations/222", "title": "Detail Dynamics Leeds"}]
    with patch.object(GoogleBusinessOAuth, "exchange_code", AsyncMock(return_value=TOKENS)), \
         patch.object(GoogleBusinessOAuth, "list_accounts", AsyncMock(return_value=accounts)), \
         patch.object(
             GoogleBusinessOAuth, "list_locations", AsyncMock(return_value=locations)
         ) as list_locations:
        resp = await signed_in.get(
            f"/api/integrations/gmb/callback?code=c&state={user.id}", follow_redirects=False
        )

    assert resp.headers["location"] == "/settings?tab=integrations&success=gmb_connected"
    list_locations.assert_awaited_once_with("access-1", "111")

    row = (await db.execute(select(GmbIntegration))).scalar_one()
    assert (row.account_id, row.location_id) == ("111", "222")
    assert row.business_name == "Detail Dynamics Leeds"


@pytest.mark.asyncio
async def test_gmb_callback_without_accounts(signed_in: AsyncClient, oauth_configured, user):
    with patch.object(GoogleBusinessOAuth, "exchange_code", AsyncMock(return_value=TOKENS)), \
         patch.object(GoogleBusinessOAuth, "list_accounts", AsyncMock(return_value=[])):
        resp = await signed_in.get(
            f"/api/integrations/gmb/callback?code=c&state={user.id}", follow_redirects=False
        )
    assert resp.headers["location"] == "/settings?tab=integrations&error=no_gmb_account"


@pytest.mark.asyncio
@pytest.mark.parametrize("provider", ["gmail", "outlook", "gmb"])
async def test_callbacks_require_state(signed_in: AsyncClient, oauth_configured, provider):
    exchange = AsyncMock(return_value=TOKENS)
    with patch.object(GoogleOAuth, "exchange_code", exchange), \
         patch.object(OutlookOAuth, "exchange_code", exchange):
        missing = await signed_in.get(
            f"/api/integrations/{provider}/callback?code=c", follow_redirects=False
        )
        foreign = await signed_in.get(
            f"/api/integrations/{provider}/callback?code=c&state={uuid.uuid4()}",
            follow_redirects=False,
        )

    assert missing.headers["location"] == "/settings?tab=integrations&error=unauthorized"
    assert foreign.headers["location"] == "/settings?tab=integrations&error=unauthorized"
    exchange.assert_not_awaited()
