"""LearnWorlds API client - OAuth2 bearer authentication with one retry on 401."""

import logging
from typing import Optional

import httpx

from learnworlds.auth.oauth2 import OAuth2Client
from learnworlds.clients.base import BaseAPIClient
from learnworlds.config import LearnWorldsConfig
from learnworlds.exceptions import TokenError
from learnworlds.types import (
    Bundle,
    Course,
    CreateUserRequest,
    EnrollUserRequest,
    Enrollment,
    UnenrollUserRequest,
    UpdateUserRequest,
    UpdateUserTagsRequest,
    User,
)

logger = logging.getLogger(__name__)


class LearnWorldsClient(BaseAPIClient):
    """Client for the LearnWorlds v2 API.

    Features:
    - Bearer token taken from the OAuth2 client at send time
    - Transparent refresh and single retry on 401
    - Courses, bundles, users and enrollments endpoints

    Usage:
        async with LearnWorldsClient(config) as client:
            await client.auth.authenticate_with_client_credentials()
            courses = await client.get_all_courses(page=1, per_page=20)
    """

    def __init__(
        self,
        config: LearnWorldsConfig,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize LearnWorlds client.

        Args:
            config: Client configuration
            timeout: Request timeout in seconds
            transport: Optional httpx transport shared with the OAuth2 client
        """
        super().__init__(
            base_url=config.api_base_url,
            timeout=timeout,
            transport=transport,
        )
        self.config = config
        self.oauth = OAuth2Client(config, transport=transport, timeout=timeout)

    @property
    def auth(self) -> OAuth2Client:
        """OAuth2 client for authentication operations."""
        return self.oauth

    async def aclose(self) -> None:
        await super().aclose()
        await self.oauth.aclose()

    async def get_auth_headers(self) -> dict:
        """Get bearer authorization header, or none for public endpoints."""
        try:
            token = await self.oauth.get_access_token()
        except TokenError:
            logger.debug("No access token available, sending request without credentials")
            return {}
        except Exception as e:
            logger.warning(
                "Token refresh failed, sending request without credentials",
                extra={"error": str(e)},
            )
            return {}
        return {"Authorization": f"Bearer {token}"}

    def can_refresh_auth(self) -> bool:
        return self.oauth.get_tokens().refresh_token is not None

    async def refresh_auth(self) -> None:
        await self.oauth.refresh_access_token()

    async def get_all_courses(
        self,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> list[Course]:
        return await self.request("GET", "/courses", params={"page": page, "per_page": per_page})

    async def get_course(self, course_id: str) -> Course:
        return await self.request("GET", f"/courses/{course_id}")

    async def get_all_bundles(
        self,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> list[Bundle]:
        return await self.request("GET", "/bundles", params={"page": page, "per_page": per_page})

    async def get_bundle(self, bundle_id: str) -> Bundle:
        return await self.request("GET", f"/bundles/{bundle_id}")

    async def create_user(self, user_data: CreateUserRequest) -> User:
        """Create a user.

        Args:
            user_data: At least "email"; optional profile fields, tags and
                send_welcome_email
        """
        return await self.request("POST", "/users", json_data=user_data)

    async def update_user(self, user_id: str, user_data: UpdateUserRequest) -> User:
        return await self.request("PUT", f"/users/{user_id}", json_data=user_data)

    async def update_user_tags(self, user_id: str, tag_data: UpdateUserTagsRequest) -> User:
        """Update a user's tags.

        Args:
            user_id: User ID
            tag_data: {"tags": [...], "action": "add" | "remove" | "replace"}
        """
        return await self.request("PATCH", f"/users/{user_id}/tags", json_data=tag_data)

    async def get_user(self, user_id: str) -> User:
        return await self.request("GET", f"/users/{user_id}")

    async def get_user_enrollments(self, user_id: str) -> list[Enrollment]:
        return await self.request("GET", f"/users/{user_id}/enrollments")

    async def enroll_user_to_product(self, enrollment_data: EnrollUserRequest) -> Enrollment:
        """Enroll a user to a course or bundle.

        Args:
            enrollment_data: {"user_id", "product_id", "product_type"} plus
                optional "enrollment_type" and "expires_at"
        """
        return await self.request("POST", "/enrollments", json_data=enrollment_data)

    async def unenroll_user_from_product(self, unenrollment_data: UnenrollUserRequest) -> None:
        """Remove a user's enrollment; identifiers travel in the body."""
        await self.request("DELETE", "/enrollments", json_data=unenrollment_data)
