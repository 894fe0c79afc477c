"""OAuth provider adapters."""

from .base import RealOAuthClient
from .facebook import (
    FacebookOAuthClient,
    MockFacebookOAuthClient,
    RealFacebookOAuthClient,
)
from .github import GitHubOAuthClient, MockGitHubOAuthClient, RealGitHubOAuthClient
from .google import GoogleOAuthClient, MockGoogleOAuthClient, RealGoogleOAuthClient

__all__ = [
    "FacebookOAuthClient",
    "GitHubOAuthClient",
    "GoogleOAuthClient",
    "MockFacebookOAuthClient",
    "MockGitHubOAuthClient",
    "MockGoogleOAuthClient",
    "RealFacebookOAuthClient",
    "RealGitHubOAuthClient",
    "RealGoogleOAuthClient",
    "RealOAuthClient",
]
