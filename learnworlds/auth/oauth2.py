"""OAuth2 authentication with automatic token refresh."""

import inspect
import logging
import time
import urllib.parse
from dataclasses import dataclass, field
from typing import Optional

import httpx

from learnworlds.config import LearnWorldsConfig
from learnworlds.exceptions import (
    NoAccessTokenError,
    NoRefreshTokenError,
    NoTokenToRevokeError,
)
from learnworlds.utils.timing import timed_operation

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "read_user_profile"
TOKEN_EXPIRY_BUFFER = 300


@dataclass
class TokenResponse:
    """Token endpoint response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "TokenResponse":
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type", "Bearer"),
            expires_in=data.get("expires_in"),
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
            raw=data,
        )


@dataclass(frozen=True)
class Tokens:
    """Snapshot of the credentials held by an OAuth2Client."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[float] = None


class OAuth2Client:
    """OAuth2 client for a LearnWorlds school.

    Supports the authorization_code, password, client_credentials and
    refresh_token grants plus token revocation. It is the only owner of
    the credential state; API clients ask it for a token at send time.
    """

    def __init__(
        self,
        config: LearnWorldsConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30,
        token_expiry_buffer: int = TOKEN_EXPIRY_BUFFER,
    ):
        """Initialize OAuth2 client.

        Args:
            config: Client configuration (may carry pre-existing tokens)
            transport: Optional httpx transport, mainly for tests
            timeout: Request timeout in seconds
            token_expiry_buffer: Seconds before expiry to trigger refresh
        """
        self.config = config
        self.token_expiry_buffer = token_expiry_buffer
        self.base_url = config.oauth_base_url
        self._access_token: Optional[str] = config.access_token
        self._refresh_token: Optional[str] = config.refresh_token
        self._expires_at: Optional[float] = None

        self.http = httpx.AsyncClient(
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "OAuth2Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    def build_authorization_url(
        self,
        scope: str = DEFAULT_SCOPE,
        state: Optional[str] = None,
    ) -> str:
        """Build the browser redirect URL for the authorization code grant.

        Args:
            scope: Scope(s) to request
            state: Optional anti-forgery state value

        Returns:
            Authorization URL to send the user to
        """
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri or "",
            "response_type": "code",
            "scope": scope,
        }
        if state:
            params["state"] = state

        return f"{self.base_url}/oauth2/authorize?{urllib.parse.urlencode(params)}"

    async def exchange_authorization_code(
        self,
        code: str,
        redirect_uri: Optional[str] = None,
    ) -> TokenResponse:
        """Exchange an authorization code for tokens.

        Args:
            code: Code received on the redirect URI
            redirect_uri: Redirect URI used in the authorization request
                (defaults to the configured one)
        """
        logger.info("Requesting access token via authorization_code grant")

        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri or self.config.redirect_uri or "",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }

        return await self._request_token(data)

    async def authenticate_with_password(
        self,
        username: str,
        password: str,
        scope: Optional[str] = None,
    ) -> TokenResponse:
        """Get tokens via the resource owner password credentials grant."""
        logger.info("Requesting access token via password grant")

        data = {
            "grant_type": "password",
            "username": username,
            "password": password,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        if scope:
            data["scope"] = scope

        return await self._request_token(data)

    async def authenticate_with_client_credentials(
        self,
        scope: Optional[str] = None,
    ) -> TokenResponse:
        """Get tokens via the client_credentials grant.

        Typically used for server-to-server access.
        """
        logger.info("Requesting access token via client_credentials grant")

        data = {
            "grant_type": "client_credentials",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }
        if scope:
            data["scope"] = scope

        return await self._request_token(data)

    async def refresh_access_token(self) -> TokenResponse:
        """Refresh the access token using the held refresh token.

        Raises:
            NoRefreshTokenError: If no refresh token is held
        """
        if not self._refresh_token:
            raise NoRefreshTokenError()

        logger.info("Refreshing access token via refresh_token grant")

        data = {
            "grant_type": "refresh_token",
            "refresh_token": self._refresh_token,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }

        return await self._request_token(data)

    async def revoke_token(self, token: Optional[str] = None) -> None:
        """Revoke a token, by default the held access token.

        The held access token and its expiry are cleared when it is the one
        revoked. The refresh token is kept.

        Raises:
            NoTokenToRevokeError: If no token is given and none is held
        """
        token_to_revoke = token or self._access_token
        if not token_to_revoke:
            raise NoTokenToRevokeError()

        data = {
            "token": token_to_revoke,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }

        response = await self.http.post(f"{self.base_url}/oauth2/revoke", data=data)
        response.raise_for_status()

        revoked_current = not token or token == self._access_token
        if revoked_current:
            self._access_token = None
            self._expires_at = None

        logger.info("Token revoked", extra={"revoked_current": revoked_current})

    async def get_access_token(self) -> str:
        """Get the access token, refreshing first if it is about to expire.

        Raises:
            NoAccessTokenError: If not authenticated
        """
        if not self._access_token:
            raise NoAccessTokenError()

        if self._expires_at is not None and self._refresh_token and self._is_token_expired():
            logger.debug("Access token expired or expiring soon, refreshing")
            await self.refresh_access_token()

        return self._access_token

    def _is_token_expired(self) -> bool:
        """Check if current token is expired or about to expire."""
        if self._expires_at is None:
            return False
        return time.time() >= (self._expires_at - self.token_expiry_buffer)

    def is_authenticated(self) -> bool:
        return bool(self._access_token)

    def set_tokens(
        self,
        access_token: str,
        refresh_token: Optional[str] = None,
        expires_at: Optional[float] = None,
    ) -> None:
        """Replace the held credentials, e.g. when restoring a session.

        The on_token_refresh callback is not invoked.
        """
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._expires_at = expires_at

    def get_tokens(self) -> Tokens:
        """Get the held credentials, e.g. for persisting a session."""
        return Tokens(
            access_token=self._access_token,
            refresh_token=self._refresh_token,
            expires_at=self._expires_at,
        )

    async def _request_token(self, data: dict) -> TokenResponse:
        """Make token request and install the returned credentials."""
        with timed_operation("token_request", logger) as timer:
            response = await self.http.post(f"{self.base_url}/oauth2/token", data=data)
        response.raise_for_status()

        token_response = TokenResponse.from_dict(response.json())
        await self._handle_token_response(token_response)

        logger.info(
            "Token obtained successfully",
            extra={
                "grant_type": data["grant_type"],
                "token_type": token_response.token_type,
                "expires_in": token_response.expires_in,
                "has_refresh_token": token_response.refresh_token is not None,
                "duration_ms": round(timer.duration_ms, 2),
            }
        )
        return token_response

    async def _handle_token_response(self, token_response: TokenResponse) -> None:
        self._access_token = token_response.access_token

        # A response without a refresh token keeps the previous one
        if token_response.refresh_token:
            self._refresh_token = token_response.refresh_token

        if token_response.expires_in is not None:
            self._expires_at = time.time() + token_response.expires_in

        callback = self.config.on_token_refresh
        if callback is not None:
            result = callback(token_response)
            if inspect.isawaitable(result):
                await result
