"""OAuth login routes (Google, Facebook, GitHub)."""

import logging
from urllib.parse import urlencode

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, status
from fastapi.responses import RedirectResponse

from kycauth.adapter.error import OAuthProviderError
from kycauth.application.usecase.auth import OAuthLoginUseCase
from kycauth.application.usecase.auth.oauth_login import OAuthLoginRequest
from kycauth.config import Settings
from kycauth.domain.error import AccountInactiveError, AccountLockedError
from kycauth.domain.service import AuthService
from kycauth.domain.value import OAuthProviderName
from kycauth.interface.api.schemas import Envelope, ProvidersData
from kycauth.interface.api.security import set_refresh_cookie

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/oauth", tags=["oauth"], route_class=DishkaRoute)


def _failure_redirect(settings: Settings, error: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"{settings.api.frontend_url}/login?{urlencode({'error': error})}",
        status_code=status.HTTP_302_FOUND,
    )


@router.get("/providers", response_model=Envelope[ProvidersData])
async def list_providers(
    auth_service: FromDishka[AuthService],
) -> Envelope[ProvidersData]:
    """Providers with credentials configured on this deployment."""
    return Envelope(data=ProvidersData(providers=auth_service.available_providers()))


@router.get("/{provider}")
async def initiate_oauth_login(
    provider: OAuthProviderName,
    auth_service: FromDishka[AuthService],
) -> RedirectResponse:
    """Redirect to the provider's consent screen.

    An unconfigured provider answers 404.

    Example:
        GET /auth/oauth/google

        Redirects to: https://accounts.google.com/o/oauth2/v2/auth?...
    """
    authorization_url = await auth_service.initiate_login(provider)
    return RedirectResponse(url=authorization_url, status_code=status.HTTP_302_FOUND)


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: str,
    oauth_login_use_case: FromDishka[OAuthLoginUseCase],
    settings: FromDishka[Settings],
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """Complete an OAuth login and hand the session to the frontend.

    On success the access token goes in the redirect URL and the refresh
    token in the cookie. Every failure redirects to the frontend login page
    with an ``error`` code instead of answering with an error body.

    Example:
        GET /auth/oauth/github/callback?code=abc123&state=xyz789

        Redirects to: https://kyc.example.com/auth/callback?token=...&success=true
        Sets cookie: refreshToken
    """
    try:
        provider_name = OAuthProviderName(provider)
    except ValueError:
        logger.warning(f"OAuth callback for unknown provider: {provider}")
        return _failure_redirect(settings, "oauth_failed")

    if error or not code or not state:
        logger.warning(f"OAuth callback without a code: provider={provider}, error={error}")
        return _failure_redirect(settings, "oauth_failed")

    try:
        session = await oauth_login_use_case.execute(
            OAuthLoginRequest(provider=provider_name, code=code, state=state)
        )
    except OAuthProviderError as e:
        logger.error(f"OAuth handshake failed: provider={provider}: {e}")
        return _failure_redirect(settings, "oauth_failed")
    except AccountInactiveError:
        return _failure_redirect(settings, "account_inactive")
    except AccountLockedError:
        return _failure_redirect(settings, "account_locked")
    except Exception:
        logger.exception(f"Unexpected error during OAuth callback: provider={provider}")
        return _failure_redirect(settings, "oauth_error")

    query = urlencode({"token": session.access_token, "success": "true"})
    redirect_response = RedirectResponse(
        url=f"{settings.api.frontend_url}/auth/callback?{query}",
        status_code=status.HTTP_302_FOUND,
    )
    # Cookies must be set on the response actually returned
    set_refresh_cookie(redirect_response, session.refresh_token, settings)
    return redirect_response
