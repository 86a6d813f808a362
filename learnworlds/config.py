"""Client configuration, built directly or from environment variables."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Called with the TokenResponse after every successful grant or refresh.
# May be a plain function or a coroutine function.
TokenRefreshCallback = Callable[[Any], Union[None, Awaitable[None]]]

ENV_PREFIX = "LEARNWORLDS_"


@dataclass(frozen=True)
class LearnWorldsConfig:
    """Settings shared by the OAuth2 client and the API client.

    Args:
        school_domain: School subdomain, e.g. "myschool" for myschool.learnworlds.com
        api_host: Host of the resource API assigned to the school
        client_id: OAuth2 client ID
        client_secret: OAuth2 client secret
        redirect_uri: Redirect URI for the authorization code grant
        access_token: Previously obtained access token
        refresh_token: Previously obtained refresh token
        on_token_refresh: Callback invoked after every token acquisition
    """

    school_domain: str
    api_host: str
    client_id: str
    client_secret: str
    redirect_uri: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    on_token_refresh: Optional[TokenRefreshCallback] = None

    def __post_init__(self):
        for name in ("school_domain", "api_host", "client_id", "client_secret"):
            if not getattr(self, name):
                raise ValueError(f"{name} is required")

    @property
    def oauth_base_url(self) -> str:
        """Base URL of the school's OAuth2 endpoints."""
        return f"https://{self.school_domain}.learnworlds.com"

    @property
    def api_base_url(self) -> str:
        """Base URL of the versioned resource API."""
        return f"https://{self.api_host}/v2"

    @classmethod
    def from_env(
        cls,
        dotenv_path: Optional[str] = None,
        on_token_refresh: Optional[TokenRefreshCallback] = None,
    ) -> "LearnWorldsConfig":
        """Build config from LEARNWORLDS_* environment variables.

        A .env file is loaded first when present; variables already set in
        the environment take precedence.

        Raises:
            ValueError: If a required variable is missing
        """
        load_dotenv(dotenv_path)

        def required(name: str) -> str:
            value = os.getenv(ENV_PREFIX + name)
            if not value:
                raise ValueError(f"{ENV_PREFIX}{name} is required")
            return value

        config = cls(
            school_domain=required("SCHOOL_DOMAIN"),
            api_host=required("API_HOST"),
            client_id=required("CLIENT_ID"),
            client_secret=required("CLIENT_SECRET"),
            redirect_uri=os.getenv(ENV_PREFIX + "REDIRECT_URI") or None,
            access_token=os.getenv(ENV_PREFIX + "ACCESS_TOKEN") or None,
            refresh_token=os.getenv(ENV_PREFIX + "REFRESH_TOKEN") or None,
            on_token_refresh=on_token_refresh,
        )

        logger.debug(
            "Loaded configuration from environment",
            extra={
                "school_domain": config.school_domain,
                "api_host": config.api_host,
                "has_access_token": config.access_token is not None,
                "has_refresh_token": config.refresh_token is not None,
            }
        )
        return config
