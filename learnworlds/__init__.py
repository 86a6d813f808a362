"""Async client for the LearnWorlds API.

Usage:
    from learnworlds import LearnWorldsClient, LearnWorldsConfig

    config = LearnWorldsConfig.from_env()
    async with LearnWorldsClient(config) as client:
        await client.auth.authenticate_with_client_credentials()
        courses = await client.get_all_courses()
"""

from .auth import OAuth2Client, TokenResponse, Tokens
from .clients import LearnWorldsClient
from .config import LearnWorldsConfig
from .exceptions import (
    ApiError,
    ErrorCode,
    LearnWorldsError,
    NoAccessTokenError,
    NoRefreshTokenError,
    NoTokenToRevokeError,
    TokenError,
)
from .types import (
    Bundle,
    Course,
    CreateUserRequest,
    EnrollUserRequest,
    Enrollment,
    PaginationParams,
    UnenrollUserRequest,
    UpdateUserRequest,
    UpdateUserTagsRequest,
    User,
)

__version__ = "1.0.0"

__all__ = [
    "Bundle",
    "Course",
    "CreateUserRequest",
    "EnrollUserRequest",
    "Enrollment",
    "PaginationParams",
    "UnenrollUserRequest",
    "UpdateUserRequest",
    "UpdateUserTagsRequest",
    "User",
    "ApiError",
    "ErrorCode",
    "LearnWorldsClient",
    "LearnWorldsConfig",
    "LearnWorldsError",
    "NoAccessTokenError",
    "NoRefreshTokenError",
    "NoTokenToRevokeError",
    "OAuth2Client",
    "TokenError",
    "TokenResponse",
    "Tokens",
]
