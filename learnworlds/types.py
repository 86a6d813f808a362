"""Typed shapes of LearnWorlds API payloads.

These are TypedDicts: values are plain dicts on the wire and at runtime.
"""

from typing import Any, Literal, Optional, TypedDict

ProductStatus = Literal["published", "draft", "archived"]
ProductType = Literal["course", "bundle"]
EnrollmentType = Literal["free", "paid"]
EnrollmentStatus = Literal["active", "inactive", "expired"]
DifficultyLevel = Literal["beginner", "intermediate", "advanced"]
TagAction = Literal["add", "remove", "replace"]


class PaginationParams(TypedDict, total=False):
    page: int
    per_page: int


class _CourseBase(TypedDict):
    id: str
    title: str
    status: ProductStatus
    created_at: str
    updated_at: str


class Course(_CourseBase, total=False):
    description: str
    price: float
    currency: str
    image_url: str
    slug: str
    category_id: str
    instructor_id: str
    duration: int
    difficulty_level: DifficultyLevel
    enrolled_users_count: int


class _BundleBase(TypedDict):
    id: str
    title: str
    status: ProductStatus
    created_at: str
    updated_at: str
    course_ids: list[str]


class Bundle(_BundleBase, total=False):
    description: str
    price: float
    currency: str
    image_url: str
    slug: str
    discount_percentage: float


class _UserBase(TypedDict):
    id: str
    email: str
    created_at: str
    updated_at: str
    is_active: bool
    roles: list[str]
    tags: list[str]


class User(_UserBase, total=False):
    first_name: str
    last_name: str
    username: str
    avatar_url: str
    bio: str
    last_login: str
    custom_fields: dict[str, Any]


class _CreateUserRequestBase(TypedDict):
    email: str


class CreateUserRequest(_CreateUserRequestBase, total=False):
    first_name: str
    last_name: str
    username: str
    password: str
    bio: str
    tags: list[str]
    custom_fields: dict[str, Any]
    send_welcome_email: bool


class UpdateUserRequest(TypedDict, total=False):
    first_name: str
    last_name: str
    username: str
    bio: str
    custom_fields: dict[str, Any]
    is_active: bool


class UpdateUserTagsRequest(TypedDict):
    tags: list[str]
    action: TagAction


class _EnrollUserRequestBase(TypedDict):
    user_id: str
    product_id: str
    product_type: ProductType


class EnrollUserRequest(_EnrollUserRequestBase, total=False):
    enrollment_type: EnrollmentType
    expires_at: str


class UnenrollUserRequest(TypedDict):
    user_id: str
    product_id: str
    product_type: ProductType


class _EnrollmentBase(TypedDict):
    id: str
    user_id: str
    product_id: str
    product_type: ProductType
    enrollment_type: EnrollmentType
    status: EnrollmentStatus
    enrolled_at: str


class Enrollment(_EnrollmentBase, total=False):
    expires_at: str
    progress: float
    completion_date: str


class ApiResponse(TypedDict, total=False):
    """Envelope wrapping every resource API response."""

    success: bool
    data: Any
    message: Optional[str]
    errors: Optional[list[str]]
