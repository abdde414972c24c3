"""Third-party OAuth integrations."""

from .oauth import OAuthConfigError, OAuthError, OAuthProfile, OAuthProvider, OAuthTokens

__all__ = ["OAuthConfigError", "OAuthError", "OAuthProfile", "OAuthProvider", "OAuthTokens"]
